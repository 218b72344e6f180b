"""
File intake: validates uploaded attachments and writes them to blob storage.

Stored files are addressed by a reference of the form
``<UPLOAD_URL_PREFIX>/<stored_filename>``, which is also the URL the
upload blueprint serves the bytes from.
"""
import logging
import mimetypes
import os
import secrets
import time
from collections import namedtuple

from flask import current_app
from werkzeug.utils import secure_filename

from printshop.errors import FileTooLargeError, FileTypeError, StorageUnavailableError, ValidationError

logger = logging.getLogger(__name__)

# Field name used by POST /api/upload; its stored names start with "file-"
UPLOAD_FIELD_NAME = 'file'

StoredFile = namedtuple(
    'StoredFile',
    ['original_filename', 'stored_filename', 'file_path', 'file_size', 'file_type'],
)


class LocalBlobStore:
    """Blob storage on the local filesystem: ``put``/``get`` by reference"""

    def __init__(self, root, url_prefix='/uploads'):
        self.root = root
        self.url_prefix = url_prefix.rstrip('/')

    def _ensure_root(self):
        """Create the uploads directory if it does not exist."""
        os.makedirs(self.root, exist_ok=True)

    def reference_for(self, name):
        return '{}/{}'.format(self.url_prefix, name)

    def name_from_reference(self, reference):
        """Return the stored filename a reference points at, or None if foreign"""
        if not isinstance(reference, str):
            return None
        prefix = self.url_prefix + '/'
        name = reference[len(prefix):] if reference.startswith(prefix) else reference
        if not name or name != secure_filename(name):
            return None
        return name

    def path_for(self, name):
        return os.path.join(self.root, name)

    def put(self, stream, name):
        """Write ``stream`` under ``name`` and return its reference"""
        try:
            self._ensure_root()
            with open(self.path_for(name), 'xb') as target:
                while True:
                    chunk = stream.read(64 * 1024)
                    if not chunk:
                        break
                    target.write(chunk)
        except OSError as exc:
            logger.exception('Could not store %s', name)
            raise StorageUnavailableError() from exc
        return self.reference_for(name)

    def get(self, reference):
        name = self.name_from_reference(reference)
        if name is None or not os.path.isfile(self.path_for(name)):
            return None
        with open(self.path_for(name), 'rb') as source:
            return source.read()

    def exists(self, reference):
        name = self.name_from_reference(reference)
        return name is not None and os.path.isfile(self.path_for(name))

    def size_of(self, reference):
        return os.path.getsize(self.path_for(self.name_from_reference(reference)))

    def delete(self, reference):
        name = self.name_from_reference(reference)
        if name is None:
            return False
        try:
            os.remove(self.path_for(name))
            return True
        except FileNotFoundError:
            return False
        except OSError:
            logger.exception('Could not delete stored file %s', name)
            return False


class FileIntake:
    """
    Size and type policy in front of a blob store

    Args:
        store (LocalBlobStore): Where accepted files are written
        max_size (int): Per-file byte limit
        allowed_extensions (set): Lower-case extensions without dots;
            empty accepts every type
    """

    def __init__(self, store, max_size, allowed_extensions=None):
        self.store = store
        self.max_size = max_size
        self.allowed_extensions = set(allowed_extensions or ())

    @staticmethod
    def extension_of(filename):
        if not filename or '.' not in filename:
            return ''
        return filename.rsplit('.', 1)[1].lower()

    def check_type(self, filename):
        if not self.allowed_extensions:
            return
        if self.extension_of(filename) not in self.allowed_extensions:
            logger.warning('Rejected upload %s: type not allowed', filename)
            raise FileTypeError(
                'File type not allowed. Accepted: {}'.format(', '.join(sorted(self.allowed_extensions)))
            )

    def check_size(self, size):
        if size > self.max_size:
            logger.warning('Rejected upload of %d bytes: limit is %d', size, self.max_size)
            raise FileTooLargeError(
                'File too large. Maximum size is {}MB.'.format(self.max_size // (1024 * 1024))
            )

    def stored_name(self, field_name, filename):
        """Field name + nanosecond timestamp + random suffix + original extension"""
        ext = self.extension_of(filename)
        field = secure_filename(field_name or 'file') or 'file'
        name = '{}-{}-{:09d}'.format(field, time.time_ns(), secrets.randbelow(10 ** 9))
        if ext.isalnum():
            name = '{}.{}'.format(name, ext)
        return name

    def accept(self, upload, field_name='file'):
        """
        Validate and store one uploaded file

        Args:
            upload (werkzeug.datastructures.FileStorage): The multipart part
            field_name (str): Form field the file came in under

        Returns:
            StoredFile: Metadata and reference of the stored blob
        """
        if upload is None or not upload.filename:
            raise ValidationError('No file uploaded')

        self.check_type(upload.filename)

        # Check file size by reading content length
        upload.stream.seek(0, os.SEEK_END)
        size = upload.stream.tell()
        upload.stream.seek(0)
        self.check_size(size)

        stored_filename = self.stored_name(field_name, upload.filename)
        reference = self.store.put(upload.stream, stored_filename)

        file_type = upload.mimetype or mimetypes.guess_type(upload.filename)[0] or 'application/octet-stream'
        logger.info('Stored upload %s as %s (%d bytes)', upload.filename, stored_filename, size)
        return StoredFile(
            original_filename=upload.filename[:255],
            stored_filename=stored_filename,
            file_path=reference,
            file_size=size,
            file_type=file_type,
        )

    def accept_many(self, uploads):
        """
        Store several ``(field_name, upload)`` pairs as a unit

        Files stored before a failure are removed again so a rejected
        request leaves nothing behind.
        """
        stored = []
        try:
            for field_name, upload in uploads:
                stored.append(self.accept(upload, field_name))
        except Exception:
            self.discard(stored)
            raise
        return stored

    def discard(self, stored_files):
        for stored in stored_files:
            self.store.delete(stored.file_path)

    def describe_reference(self, reference, original_filename=None, file_type=None):
        """
        Build StoredFile metadata for a reference returned by an earlier upload

        Only blobs written by the standalone upload endpoint may be claimed
        this way; ID documents and other orders' attachments may not.
        """
        name = self.store.name_from_reference(reference)
        if name is None or not name.startswith(UPLOAD_FIELD_NAME + '-'):
            logger.warning('Rejected file reference %s: not a standalone upload', reference)
            raise ValidationError('Invalid file reference: {}'.format(reference),
                                  fields={'files': 'Only files sent to /api/upload can be attached'})
        if not self.store.exists(reference):
            raise ValidationError('Uploaded file not found: {}'.format(reference),
                                  fields={'files': 'Uploaded file not found'})
        return StoredFile(
            original_filename=(original_filename or name)[:255],
            stored_filename=name,
            file_path=self.store.reference_for(name),
            file_size=self.store.size_of(reference),
            file_type=file_type or mimetypes.guess_type(name)[0] or 'application/octet-stream',
        )


def init_storage(app):
    store = LocalBlobStore(app.config['UPLOAD_FOLDER'], app.config.get('UPLOAD_URL_PREFIX', '/uploads'))
    app.extensions['printshop.file_intake'] = FileIntake(
        store,
        max_size=app.config['MAX_UPLOAD_SIZE'],
        allowed_extensions=app.config.get('ALLOWED_UPLOAD_EXTENSIONS'),
    )


def get_file_intake():
    return current_app.extensions['printshop.file_intake']
