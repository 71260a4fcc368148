"""Image pipeline: discover, resolve, validate and upload note images.

Exports
-------
extract_image_references
    Find every image embed (both syntaxes) in a note.
is_external
    Whether a reference is an ``http(s)`` URL.
resolve_image_path
    Map a reference to an existing vault file.
mime_for_path
    Check an extension against the upload allow-list.
upload_images / async_upload_images
    Upload every local image and build the image map.
"""

from .detect import extract_image_references, is_external
from .resolve import resolve_image_path
from .upload import async_upload_images, upload_images
from .validate import mime_for_path

__all__ = [
    "async_upload_images",
    "extract_image_references",
    "is_external",
    "mime_for_path",
    "resolve_image_path",
    "upload_images",
]
