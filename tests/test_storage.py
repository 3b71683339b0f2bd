import io
import os

import pytest
from werkzeug.datastructures import FileStorage as UploadedFile

from basma.constants import UploadCategory
from basma.exceptions import ValidationError
from basma.storage import FileStorage, build_path, timestamped_filename, validate_image


def upload(data=b'imagedata', name='a.png', mimetype='image/png'):
    return UploadedFile(stream=io.BytesIO(data), filename=name, content_type=mimetype)


def test_build_path_layout():
    assert build_path(UploadCategory.POSTS, 4, '123.png') == 'posts/4/123.png'
    assert build_path(UploadCategory.AVATARS, 4, '../../etc/passwd') == 'avatars/4/etc_passwd'


def test_timestamped_filename_uses_mime_extension():
    assert timestamped_filename('image/jpeg').endswith('.jpg')
    assert timestamped_filename('image/webp').endswith('.webp')


def test_validate_image_accepts_allowed_types(ctx):
    for mimetype in ('image/jpeg', 'image/png', 'image/webp', 'image/gif'):
        assert validate_image(upload(mimetype=mimetype)) == b'imagedata'


@pytest.mark.parametrize('file', [
    None,
    upload(name=''),
    upload(mimetype='application/pdf'),
    upload(data=b''),
])
def test_validate_image_rejections(ctx, file):
    with pytest.raises(ValidationError):
        validate_image(file)


def test_validate_image_size_ceiling(ctx):
    limit = ctx.config['MAX_IMAGE_BYTES']
    assert len(validate_image(upload(data=b'0' * limit))) == limit
    with pytest.raises(ValidationError) as excinfo:
        validate_image(upload(data=b'0' * (limit + 1)))
    assert excinfo.value.details == {'image': 'too_large'}


def test_upload_writes_file_and_returns_url(ctx):
    storage = FileStorage()
    url = storage.upload('posts/1/x.png', b'abc')
    assert url == '/uploads/posts/1/x.png'
    assert storage.exists('posts/1/x.png')
    with open(os.path.join(ctx.config['UPLOAD_FOLDER'], 'posts', '1', 'x.png'), 'rb') as fh:
        assert fh.read() == b'abc'


def test_upload_refuses_paths_outside_root(ctx):
    with pytest.raises(ValidationError):
        FileStorage().upload('../outside.png', b'abc')
