# Public HTML pages
from flask import Blueprint, abort, current_app, redirect, render_template, request, url_for
from .errors import FlatlogError
from .posts import parse_id
from .render import comment_count, render_comments, render_markdown

pages = Blueprint('pages', __name__)


def _site():
    settings = current_app.extensions['flatlog'].settings
    return {
        'blog_name': settings.blog_name,
        'user_name': settings.user_name,
        'blog_url': settings.blog_url,
        'user_url': settings.user_url,
        'lang': settings.lang,
    }


@pages.route('/')
@pages.route('/list')
def post_list():
    svc = current_app.extensions['flatlog']
    category = request.args.get('category', '')
    return render_template(
        'list.html',
        site=_site(),
        posts=svc.posts.list(category=category or None),
        tags=svc.posts.tags(),
        category=category,
    )


@pages.route('/post/<post_id>')
def post_detail(post_id):
    svc = current_app.extensions['flatlog']
    try:
        post = svc.posts.get(parse_id(post_id))
    except FlatlogError as e:
        abort(e.status_code)
    forest = svc.comments.build_tree(post.id)
    return render_template(
        'post.html',
        site=_site(),
        post=post,
        body=render_markdown(post.body),
        comments=render_comments(forest),
        comment_total=comment_count(forest),
        hcaptcha_site_key=svc.challenge.site_key if svc.challenge.enabled else '',
    )


@pages.route('/post')
def legacy_post():
    post_id = request.args.get('id', '')
    try:
        post_id = parse_id(post_id)
    except FlatlogError:
        abort(400)
    return redirect(url_for('pages.post_detail', post_id=post_id), code=301)
