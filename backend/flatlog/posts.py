# Post records: one .mlmark file per post id, deleted posts go to a trash folder

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import os
import re
from .errors import NotFound, ValidationFailure

POST_FILE_PATTERN = re.compile(r'^([0-9]+)\.mlmark$')
DECIMAL_ID_PATTERN = re.compile(r'[0-9]+')
METADATA_PATTERN = re.compile(r'<ml-metadata>([\s\S]*?)</ml-metadata>')
FIELD_PATTERN = re.compile(r'<ml-(.+?)>(.*?)</ml-\1>')
METADATA_END = '</ml-metadata>'


def today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def parse_id(value) -> int:
    """Post ids are positive decimal integers."""
    text = str(value or '').strip()
    if not DECIMAL_ID_PATTERN.fullmatch(text) or int(text) < 1:
        raise ValidationFailure('Invalid post id.')
    return int(text)


@dataclass
class Post:
    id: int
    title: str
    tag: str
    created: str
    edited: str
    body: str

    def summary(self) -> dict:
        return {
            'slug': self.id,
            'title': self.title,
            'tag': self.tag,
            'cdate': self.created,
        }

    def serialize(self) -> str:
        return (
            '<ml-metadata>\n'
            f'<ml-title>{self.title}</ml-title>\n'
            f'<ml-tag>{self.tag}</ml-tag>\n'
            f'<ml-cdate>{self.created}</ml-cdate>\n'
            f'<ml-edate>{self.edited}</ml-edate>\n'
            '</ml-metadata>\n\n'
            f'{self.body}'
        )


def parse_post(post_id: int, raw: str) -> Post:
    metadata = {}
    block = METADATA_PATTERN.search(raw)
    if block:
        for name, value in FIELD_PATTERN.findall(block.group(1)):
            metadata[name] = value
    end = raw.find(METADATA_END)
    body = raw[end + len(METADATA_END):].strip() if end >= 0 else ''
    return Post(
        id=post_id,
        title=metadata.get('title', ''),
        tag=metadata.get('tag', ''),
        created=metadata.get('cdate', ''),
        edited=metadata.get('edate', ''),
        body=body,
    )


def _clean(title, tag, body):
    title = (title or '').strip()
    tag = (tag or '').strip()
    body = (body or '').strip()
    if not title or not tag or not body:
        raise ValidationFailure()
    return title, tag, body


class PostRepository:
    def __init__(self, posts_dir: str, comments=None):
        self.posts_dir = posts_dir
        self.trash_dir = os.path.join(posts_dir, 'trash')
        # CommentStore whose collections follow their post into the trash
        self.comments = comments

    def _path(self, post_id: int) -> str:
        return os.path.join(self.posts_dir, f'{post_id}.mlmark')

    @staticmethod
    def _scan(directory):
        if not os.path.isdir(directory):
            return []
        ids = []
        for filename in os.listdir(directory):
            match = POST_FILE_PATTERN.match(filename)
            if match:
                ids.append(int(match.group(1)))
        return ids

    def ids(self):
        return sorted(self._scan(self.posts_dir), reverse=True)

    def next_id(self) -> int:
        # Trashed ids count too, so a deleted post's id is never handed out again
        taken = self._scan(self.posts_dir) + self._scan(self.trash_dir)
        return max(taken) + 1 if taken else 1

    def exists(self, post_id: int) -> bool:
        return os.path.isfile(self._path(post_id))

    def raw(self, post_id: int) -> str:
        path = self._path(post_id)
        if not os.path.isfile(path):
            raise NotFound('Post not found')
        with open(path, encoding='utf-8') as f:
            return f.read()

    def get(self, post_id: int) -> Post:
        return parse_post(post_id, self.raw(post_id))

    def title(self, post_id):
        """Title for display joins; None when the post cannot be read."""
        try:
            return self.get(parse_id(post_id)).title or None
        except (NotFound, ValidationFailure, OSError, UnicodeDecodeError):
            return None

    def list(self, limit=None, category=None):
        posts = []
        for post_id in self.ids():
            if limit is not None and len(posts) >= limit:
                break
            try:
                raw = self.raw(post_id)
            except NotFound:
                continue
            if not METADATA_PATTERN.search(raw):
                logging.debug(f'Post {post_id} has no metadata block, skipped')
                continue
            post = parse_post(post_id, raw)
            if category and post.tag != category:
                continue
            posts.append(post)
        return posts

    def tags(self):
        return sorted({post.tag for post in self.list() if post.tag})

    def _write(self, post: Post):
        os.makedirs(self.posts_dir, exist_ok=True)
        with open(self._path(post.id), 'w', encoding='utf-8') as f:
            f.write(post.serialize())

    def create(self, title, tag, body) -> Post:
        title, tag, body = _clean(title, tag, body)
        now = today()
        post = Post(id=self.next_id(), title=title, tag=tag, created=now, edited=now, body=body)
        self._write(post)
        logging.info(f'Post {post.id} created')
        return post

    def update(self, post_id: int, title, tag, body) -> Post:
        title, tag, body = _clean(title, tag, body)
        existing = self.get(post_id)
        post = Post(
            id=post_id,
            title=title,
            tag=tag,
            created=existing.created or today(),
            edited=today(),
            body=body,
        )
        self._write(post)
        logging.info(f'Post {post_id} updated')
        return post

    def trash(self, post_id: int):
        path = self._path(post_id)
        if not os.path.isfile(path):
            raise NotFound('Post not found')
        os.makedirs(self.trash_dir, exist_ok=True)
        os.replace(path, os.path.join(self.trash_dir, f'{post_id}.mlmark'))
        logging.info(f'Post {post_id} moved to trash')
        if self.comments is not None:
            self.comments.trash(post_id)
