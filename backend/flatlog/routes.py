# All API routes are in this one file
from flask import request, jsonify, Blueprint, current_app, Response
from functools import wraps
from .errors import AuthFailure, NotFound, ValidationFailure
from .posts import parse_id

# This line creates the 'api' object that __init__.py is looking for
api = Blueprint('api', __name__)


def services():
    return current_app.extensions['flatlog']


def payload():
    """JSON body if there is one, form fields otherwise."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form


def require_strings(data, *names):
    """Fields that are present must be strings."""
    for name in names:
        value = data.get(name)
        if value is not None and not isinstance(value, str):
            raise ValidationFailure(f'Field {name} must be a string.')


def proof_required(f):
    """Reject the request unless it carries a valid admin proof."""
    @wraps(f)
    def decorated(*args, **kwargs):
        data = payload()
        proof = data.get('proof') or data.get('token')
        if not services().auth.verify(proof):
            current_app.logger.info(f'Unauthorized admin request to {request.path}')
            raise AuthFailure()
        return f(*args, **kwargs)
    return decorated


# Basic health and site endpoints
@api.route('/health', methods=['GET'])
def api_health():
    current_app.logger.debug('GET /api/health invoked')
    return jsonify({'status': 'ok'}), 200

@api.route('/site/meta', methods=['GET'])
def site_meta():
    return jsonify({'title': services().settings.blog_name}), 200

@api.route('/admin/verify', methods=['POST'])
@proof_required
def admin_verify():
    return jsonify({'ok': True}), 200

# --- Posts ---

@api.route('/user/post/list/<limit>', methods=['GET'])
def post_list(limit):
    try:
        limit = int(limit)
    except ValueError:
        return jsonify({'message': 'Invalid limit'}), 400
    posts = services().posts.list(limit=max(limit, 0))
    return jsonify([p.summary() for p in posts]), 200

@api.route('/user/post/get', methods=['GET'])
def post_get():
    post_id = parse_id(request.args.get('id'))
    return Response(services().posts.raw(post_id), mimetype='text/plain')

@api.route('/admin/post/new', methods=['POST'])
@proof_required
def post_new():
    data = payload()
    require_strings(data, 'title', 'tag', 'body')
    post = services().posts.create(data.get('title'), data.get('tag'), data.get('body'))
    current_app.logger.info(f'Post {post.id} created via admin API')
    return jsonify({'id': post.id}), 200

@api.route('/admin/post/edit/<post_id>', methods=['POST'])
@proof_required
def post_edit(post_id):
    data = payload()
    require_strings(data, 'title', 'tag', 'body')
    services().posts.update(parse_id(post_id), data.get('title'), data.get('tag'), data.get('body'))
    return jsonify({'ok': True}), 200

@api.route('/admin/post/delete/<post_id>', methods=['POST'])
@proof_required
def post_delete(post_id):
    services().posts.trash(parse_id(post_id))
    return jsonify({'ok': True}), 200

# --- Comments ---

@api.route('/user/chat/new', methods=['POST'])
def comment_new():
    data = payload()
    require_strings(data, 'name', 'text', 'date', 'parentId', 'email', 'hcaptchaToken')
    post_id = str(data.get('postId') or '').strip()
    name = data.get('name')
    text = data.get('text')
    date = data.get('date')
    if not post_id or not name or not text or not date:
        return jsonify({'message': 'Required fields are missing.'}), 400

    svc = services()
    if not svc.posts.exists(parse_id(post_id)):
        raise NotFound('Post not found')
    svc.challenge.check(data.get('hcaptchaToken'))

    comment = svc.comments.append(
        post_id,
        name=name,
        text=text,
        date=date,
        parent_id=data.get('parentId'),
        email=data.get('email'),
    )
    current_app.logger.info(f'Comment {comment.id} added to post {post_id}')
    return jsonify({'success': True, 'comment': comment.to_dict()}), 200

@api.route('/admin/comment/list', methods=['POST'])
@proof_required
def comment_list():
    svc = services()
    return jsonify(svc.comments.list_all(svc.posts.title)), 200

@api.route('/admin/comment/recent', methods=['POST'])
@proof_required
def comment_recent():
    svc = services()
    return jsonify(svc.comments.recent(svc.posts.title)), 200

@api.route('/admin/comment/get', methods=['POST'])
@proof_required
def comment_get():
    comment_id = request.args.get('id') or payload().get('id')
    if not comment_id or not isinstance(comment_id, str):
        raise ValidationFailure()
    post_id, comment = services().comments.get(comment_id)
    return jsonify({
        'id': comment.id,
        'content': comment.text,
        'author': comment.name,
        'cdate': comment.date,
        'postId': post_id,
    }), 200

@api.route('/admin/comment/edit/<comment_id>', methods=['POST'])
@proof_required
def comment_edit(comment_id):
    data = payload()
    require_strings(data, 'content')
    content = data.get('content')
    if not content:
        raise ValidationFailure()
    services().comments.edit(comment_id, content)
    current_app.logger.info(f'Comment {comment_id} edited')
    return jsonify({'ok': True}), 200

@api.route('/admin/comment/delete/<comment_id>', methods=['POST'])
@proof_required
def comment_delete(comment_id):
    services().comments.delete(comment_id)
    current_app.logger.info(f'Comment {comment_id} deleted')
    return jsonify({'ok': True}), 200
