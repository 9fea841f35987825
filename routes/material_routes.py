from __future__ import annotations

from flask import Blueprint, current_app, request, jsonify

from extensions import db
from models import Material
from utils import admin_scope_required, json_body, parse_int, parse_iso_date, server_error
from utils.tenant import get_admin_id_from_request, get_scoped, scoped_select
from utils.upload_tokens import (
    ALLOWED_CONTENT_TYPES,
    UploadTokenError,
    issue_upload_token,
    material_type_for,
    verify_upload_token,
)

material_bp = Blueprint('materials', __name__, url_prefix='/api/materials')

MATERIAL_TYPES = tuple(sorted(set(ALLOWED_CONTENT_TYPES.values())))


def _signing_secret() -> str:
    return current_app.config.get('UPLOAD_TOKEN_SECRET') or current_app.config.get('SECRET_KEY') or ''


def _blob_url(pathname: str) -> str:
    return f"{current_app.config.get('BLOB_BASE_URL', '').rstrip('/')}/{pathname.lstrip('/')}"


@material_bp.route('', methods=['GET'])
def list_materials():
    admin_id = get_admin_id_from_request()
    try:
        query = scoped_select(Material, admin_id)
        group = (request.args.get('group') or '').strip()
        if group:
            query = query.filter(Material.group_name == group)
        materials = db.session.execute(query).scalars().all()
        return jsonify([m.to_dict() for m in materials])
    except Exception:
        return server_error('Failed to load materials')


@material_bp.route('/upload', methods=['POST'])
@admin_scope_required
def request_upload():
    """Phase one of an upload: sign the file name and type the browser may store."""
    body = json_body()
    try:
        token = issue_upload_token(
            body.get('pathname') or body.get('fileName') or '',
            body.get('contentType') or '',
            _signing_secret(),
            ttl_seconds=int(current_app.config.get('UPLOAD_TOKEN_TTL_SECONDS', 900)),
        )
    except UploadTokenError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify({**token, 'url': _blob_url(token['pathname'])})


@material_bp.route('', methods=['POST'])
def create_material():
    body = json_body()
    title = (body.get('title') or '').strip()
    if not title:
        return jsonify({'error': 'Title is required'}), 400

    file_url = (body.get('fileUrl') or '').strip()
    file_type = body.get('fileType') or None
    if body.get('uploadToken'):
        try:
            claims = verify_upload_token(body['uploadToken'], _signing_secret())
        except UploadTokenError as e:
            return jsonify({'error': str(e)}), 400
        file_url = _blob_url(claims['pathname'])
        file_type = material_type_for(claims.get('contentType')) or file_type
    if not file_url:
        return jsonify({'error': 'fileUrl or uploadToken is required'}), 400
    file_type = file_type or 'document'
    if file_type not in MATERIAL_TYPES:
        return jsonify({'error': f'Invalid fileType: {file_type}'}), 400
    try:
        due_date = parse_iso_date(body.get('dueDate'))
    except ValueError:
        return jsonify({'error': 'Dates must be in YYYY-MM-DD format'}), 400

    try:
        material = Material(
            admin_id=get_admin_id_from_request(),
            title=title,
            description=body.get('description') or None,
            file_url=file_url,
            file_type=file_type,
            group_name=body.get('group') or None,
            uploaded_by=body.get('uploadedBy') or None,
            due_date=due_date,
        )
        db.session.add(material)
        db.session.commit()
        return jsonify(material.to_dict())
    except Exception:
        return server_error('Failed to save material')


@material_bp.route('', methods=['DELETE'])
def delete_material():
    material_id = parse_int(request.args.get('id'))
    if material_id is None:
        return jsonify({'error': 'Missing id'}), 400
    material = get_scoped(Material, material_id, get_admin_id_from_request())
    if material is None:
        return jsonify({'error': 'Material not found'}), 404
    try:
        db.session.delete(material)
        db.session.commit()
        return jsonify({'success': True})
    except Exception:
        return server_error('Failed to delete material')
