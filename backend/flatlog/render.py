# HTML fragments handed to the page templates

import markdown
from markdown.extensions import Extension
from markupsafe import Markup, escape
from .comments import walk

INDENT_PX = 28


class NoSetextHeadings(Extension):
    """A line underlined with --- or === is never turned into a heading."""

    def extendMarkdown(self, md):
        md.parser.blockprocessors.deregister('setextheader')


def _markdown_extensions():
    return ['nl2br', 'fenced_code', 'tables', 'sane_lists', NoSetextHeadings()]


def render_markdown(text: str) -> Markup:
    """Post bodies are written by the admin and rendered as-is."""
    html = markdown.markdown(text or '', extensions=_markdown_extensions())
    return Markup(html)


def _open_node(node, depth) -> str:
    c = node.comment
    name = escape(c.name or 'Anonymous')
    rail = '<div class="comment-rail"></div>' if depth > 0 else ''
    return (
        f'<li class="comment depth-{depth}" style="margin-left:{depth * INDENT_PX}px;">'
        f'{rail}'
        f'<div id="comment-card-{escape(c.id)}" class="comment-card">'
        f'<div class="comment-head"><strong>{name}</strong> <small>{escape(c.date)}</small>'
        f' <button type="button" class="reply-btn" data-reply-name="{name}"'
        f' data-reply-id="{escape(c.id)}">Reply</button></div>'
        f'<div class="comment-text">{escape(c.text)}</div>'
        f'</div>'
    )


def _render_forest(forest) -> str:
    # Explicit stack: reply chains can be deeper than the recursion limit
    parts = []
    stack = [(0, node, False) for node in reversed(forest)]
    while stack:
        depth, node, closing = stack.pop()
        if closing:
            if node.children:
                parts.append('</ul>')
            parts.append('</li>')
            continue
        parts.append(_open_node(node, depth))
        stack.append((depth, node, True))
        if node.children:
            parts.append('<ul class="comment-replies">')
            stack.extend((depth + 1, child, False) for child in reversed(node.children))
    return ''.join(parts)


def render_comments(forest, title='Comments', empty='No comments yet.') -> Markup:
    if not forest:
        return Markup('<p class="no-comments">{}</p>').format(empty)
    return Markup(
        '<section class="comments-section"><h3>{}</h3>'
        '<ul class="comment-list">{}</ul></section>'
    ).format(title, Markup(_render_forest(forest)))


def comment_count(forest) -> int:
    return sum(1 for _ in walk(forest))
