"""
Local file storage for post images and avatars.

Paths follow `{category}/{owner_id}/{filename}` under UPLOAD_FOLDER and are
served back from `/uploads/<path>`. Size and type checks happen in
`validate_image`, called before anything is written.
"""
import os
import time

from flask import current_app, url_for
from werkzeug.utils import secure_filename

from .exceptions import ValidationError

EXTENSIONS_BY_MIME = {
    'image/jpeg': 'jpg',
    'image/png': 'png',
    'image/webp': 'webp',
    'image/gif': 'gif',
}


def build_path(category, owner_id, filename):
    return f"{category}/{owner_id}/{secure_filename(filename)}"


def validate_image(file):
    """
    Checks an uploaded FileStorage against the size ceiling and MIME allow-list.

    Returns:
        bytes: the file content, read once.

    Raises:
        ValidationError: missing, oversized or non-image file.
    """
    if file is None or not file.filename:
        raise ValidationError('No file provided.', details={'image': 'required'})

    allowed = current_app.config.get('ALLOWED_IMAGE_MIME_TYPES', set(EXTENSIONS_BY_MIME))
    if file.mimetype not in allowed:
        raise ValidationError('Unsupported image type.', details={'image': file.mimetype})

    data = file.read()
    max_bytes = current_app.config.get('MAX_IMAGE_BYTES', 5 * 1024 * 1024)
    if len(data) > max_bytes:
        raise ValidationError('File too large. The maximum size is 5MB.',
                              details={'image': 'too_large'})
    if not data:
        raise ValidationError('Empty file.', details={'image': 'empty'})
    return data


def timestamped_filename(mimetype):
    """`{milliseconds}.{ext}`, unique enough per owner folder."""
    ext = EXTENSIONS_BY_MIME.get(mimetype, 'bin')
    return f"{int(time.time() * 1000)}.{ext}"


class FileStorage:
    """Writes bytes under the configured upload root and builds their public URLs."""

    def __init__(self, root=None):
        self.root = root or current_app.config['UPLOAD_FOLDER']

    def _absolute(self, path):
        full = os.path.abspath(os.path.join(self.root, path))
        if not full.startswith(os.path.abspath(self.root) + os.sep):
            raise ValidationError('Invalid storage path.')
        return full

    def upload(self, path, data):
        """Stores data at path (overwriting) and returns its public URL."""
        full = self._absolute(path)
        os.makedirs(os.path.dirname(full), exist_ok=True)
        with open(full, 'wb') as fh:
            fh.write(data)
        current_app.logger.info(f"Stored upload {path} ({len(data)} bytes)")
        return self.public_url(path)

    def public_url(self, path):
        return url_for('public_bp.uploaded_file', path=path, _external=False)

    def exists(self, path):
        return os.path.isfile(self._absolute(path))
