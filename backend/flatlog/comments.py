# Per-post comment collections stored as JSON arrays, and the reply tree built from them

from dataclasses import dataclass, field
from typing import Optional
import json
import logging
import os
import re
import secrets
import string
import time
from .errors import NotFound, StorageCorruption, ValidationFailure

POST_ID_PATTERN = re.compile(r'^[\w-]+$')
DECIMAL_PATTERN = re.compile(r'[0-9]+')
_BASE36 = string.digits + string.ascii_lowercase


def _base36(number: int) -> str:
    if number == 0:
        return '0'
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return ''.join(reversed(digits))


def new_comment_id() -> str:
    """Millisecond timestamp in base36 followed by five random base36 characters."""
    suffix = ''.join(secrets.choice(_BASE36) for _ in range(5))
    return _base36(int(time.time() * 1000)) + suffix


def _date_key(date: str) -> int:
    digits = re.sub(r'\D', '', str(date or ''))
    return int(digits) if digits else 0


def _text(value) -> str:
    if value is None:
        return ''
    return value if isinstance(value, str) else str(value)


def _post_sort_key(post_id: str):
    return (0, int(post_id), '') if DECIMAL_PATTERN.fullmatch(post_id) else (1, 0, post_id)


@dataclass
class Comment:
    id: str
    name: str
    text: str
    date: str
    parent_id: Optional[str] = None
    email: str = ''

    @classmethod
    def from_dict(cls, data: dict) -> 'Comment':
        parent_id = data.get('parentId')
        return cls(
            id=str(data.get('id', '')),
            name=_text(data.get('name')),
            text=_text(data.get('text')),
            date=_text(data.get('date')),
            parent_id=parent_id if isinstance(parent_id, str) and parent_id else None,
            email=_text(data.get('email')),
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'parentId': self.parent_id,
            'name': self.name,
            'email': self.email,
            'text': self.text,
            'date': self.date,
        }


@dataclass
class CommentNode:
    comment: Comment
    children: list = field(default_factory=list)

    @property
    def id(self):
        return self.comment.id


def walk(forest):
    """Yield (depth, node) depth-first, parents before their replies."""
    stack = [(0, node) for node in reversed(forest)]
    while stack:
        depth, node = stack.pop()
        yield depth, node
        stack.extend((depth + 1, child) for child in reversed(node.children))


class CommentStore:
    """Reads and writes COMMENTS_DIR/<post_id>.json.

    Every mutation is an unguarded read-modify-write of the whole file, so
    two writers racing on the same post can lose an update.
    """

    def __init__(self, comments_dir: str):
        self.comments_dir = comments_dir
        self.trash_dir = os.path.join(comments_dir, 'trash')
        # comment id -> post id; None until the first lookup scans the directory
        self._index = None

    # --- Files ---

    def _path(self, post_id) -> str:
        return os.path.join(self.comments_dir, f'{post_id}.json')

    def post_ids(self):
        if not os.path.isdir(self.comments_dir):
            return []
        found = []
        for filename in os.listdir(self.comments_dir):
            stem, ext = os.path.splitext(filename)
            if ext == '.json' and os.path.isfile(os.path.join(self.comments_dir, filename)):
                found.append(stem)
        return sorted(found, key=_post_sort_key)

    @staticmethod
    def _decode(path):
        try:
            with open(path, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageCorruption(str(e)) from e
        if not isinstance(data, list):
            raise StorageCorruption(f'expected a JSON array, got {type(data).__name__}')
        return [Comment.from_dict(item) for item in data if isinstance(item, dict)]

    def _read(self, post_id):
        """Return (comments, corrupt). Unreadable files count as empty."""
        path = self._path(post_id)
        if not os.path.exists(path):
            return [], False
        try:
            return self._decode(path), False
        except StorageCorruption as e:
            logging.warning(f'Comment file for post {post_id} is unreadable, treating as empty: {e.message}')
            return [], True

    def _write(self, post_id, comments):
        os.makedirs(self.comments_dir, exist_ok=True)
        with open(self._path(post_id), 'w', encoding='utf-8') as f:
            json.dump([c.to_dict() for c in comments], f, indent=2, ensure_ascii=False)

    def load(self, post_id):
        return self._read(post_id)[0]

    # --- Index ---

    def _rebuild_index(self):
        index = {}
        for post_id in self.post_ids():
            for comment in self.load(post_id):
                index.setdefault(comment.id, post_id)
        self._index = index
        logging.debug(f'Comment index rebuilt: {len(index)} comments')
        return index

    def _find_in(self, post_id, comment_id):
        comments = self.load(post_id)
        for position, comment in enumerate(comments):
            if comment.id == comment_id:
                return post_id, comments, position
        return None

    def _locate(self, comment_id):
        """Return (post_id, comments, position) of the first comment with this id."""
        if not comment_id:
            raise ValidationFailure()
        if self._index is not None and comment_id in self._index:
            found = self._find_in(self._index[comment_id], comment_id)
            if found:
                return found
        # Missing or stale entry: rescan once
        index = self._rebuild_index()
        if comment_id in index:
            found = self._find_in(index[comment_id], comment_id)
            if found:
                return found
        raise NotFound('Comment not found')

    # --- Operations ---

    def append(self, post_id, name, text, date, parent_id=None, email='') -> Comment:
        post_id = str(post_id or '').strip()
        if not post_id or not name or not text or not date:
            raise ValidationFailure()
        if not POST_ID_PATTERN.match(post_id):
            raise ValidationFailure('Invalid post id.')
        if any(v is not None and not isinstance(v, str) for v in (name, text, date, parent_id, email)):
            raise ValidationFailure('Comment fields must be strings.')

        comments, corrupt = self._read(post_id)
        if corrupt:
            backup = self._path(post_id) + '.corrupt'
            os.replace(self._path(post_id), backup)
            logging.warning(f'Unreadable comment file for post {post_id} moved to {backup}')

        comment = Comment(
            id=new_comment_id(),
            parent_id=parent_id or None,
            name=name,
            email=email or '',
            text=text,
            date=date,
        )
        comments.append(comment)
        self._write(post_id, comments)
        if self._index is not None:
            self._index.setdefault(comment.id, post_id)
        logging.debug(f'Comment {comment.id} appended to post {post_id}')
        return comment

    def get(self, comment_id):
        post_id, comments, position = self._locate(comment_id)
        return post_id, comments[position]

    def edit(self, comment_id, new_text):
        if not new_text:
            raise ValidationFailure()
        post_id, comments, position = self._locate(comment_id)
        comments[position].text = new_text
        self._write(post_id, comments)
        logging.debug(f'Comment {comment_id} edited in post {post_id}')
        return comments[position]

    def delete(self, comment_id):
        """Remove a comment. Its direct replies become top-level comments."""
        post_id, comments, position = self._locate(comment_id)
        del comments[position]
        for comment in comments:
            if comment.parent_id == comment_id:
                comment.parent_id = None
        self._write(post_id, comments)
        if self._index is not None:
            self._index.pop(comment_id, None)
        logging.debug(f'Comment {comment_id} deleted from post {post_id}')

    def trash(self, post_id):
        path = self._path(post_id)
        if not os.path.exists(path):
            return False
        os.makedirs(self.trash_dir, exist_ok=True)
        os.replace(path, os.path.join(self.trash_dir, f'{post_id}.json'))
        if self._index is not None:
            post_id = str(post_id)
            self._index = {cid: pid for cid, pid in self._index.items() if pid != post_id}
        logging.info(f'Comments for post {post_id} moved to trash')
        return True

    # --- Reading ---

    def build_tree(self, post_id):
        """Return the reply forest for a post, in storage order at every level.

        A comment whose parent is missing from the collection is a root.
        So is any comment whose parent chain loops back on itself.
        """
        comments = self.load(post_id)
        nodes = [CommentNode(c) for c in comments]
        by_id = {}
        for node in nodes:
            by_id.setdefault(node.id, node)

        roots = []
        for node in nodes:
            parent = by_id.get(node.comment.parent_id) if node.comment.parent_id else None
            if parent is None or self._is_cyclic(node, by_id):
                roots.append(node)
            else:
                parent.children.append(node)
        return roots

    @staticmethod
    def _is_cyclic(node, by_id) -> bool:
        seen = set()
        parent_id = node.comment.parent_id
        while parent_id in by_id:
            if parent_id == node.id:
                return True
            if parent_id in seen:
                # Loop further up; its own members get promoted instead
                return False
            seen.add(parent_id)
            parent_id = by_id[parent_id].comment.parent_id
        return False

    def list_all(self, title_lookup=None):
        """Every stored comment with its post title, newest date first."""
        entries = []
        for post_id in self.post_ids():
            title = None
            if title_lookup is not None:
                title = title_lookup(post_id)
            for comment in self.load(post_id):
                entries.append({
                    'id': comment.id,
                    'postId': post_id,
                    'postTitle': title or 'Unknown Post',
                    'author': comment.name,
                    'content': comment.text,
                    'cdate': comment.date,
                })
        entries.sort(key=lambda e: _date_key(e['cdate']), reverse=True)
        return entries

    def recent(self, title_lookup=None, limit=10):
        return self.list_all(title_lookup)[:limit]
