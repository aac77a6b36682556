# bakery/core/storage_utils.py
from bakery.core.config import get_settings
from bakery.core.supabase_client import supabase_admin


def _bucket():
    return supabase_admin().storage.from_(get_settings().PAYMENT_PROOF_BUCKET)


def upload_to_storage(path: str, file_bytes: bytes, content_type: str) -> str:
    """
    Upload raw bytes to the payment-proof bucket and return the object path.

    The bucket is private, so we store the path on the order rather than a
    public URL. Admins get a short-lived link via `create_signed_url`.

    Args:
        path: Object path inside the bucket.
              Example: "<user_id>_1704891600000.pdf"
        file_bytes: File content in bytes.
        content_type: MIME type sent along with the object.

    Raises:
        Any exception raised by Supabase client if upload fails.
    """
    _bucket().upload(path, file_bytes, {"content-type": content_type})
    return path


def delete_from_storage(path: str) -> None:
    """
    Delete a file from the payment-proof bucket by its object path.
    """
    # Supabase Python client expects a list of paths.
    _bucket().remove([path])


def create_signed_url(path: str, expires_in: int = 3600) -> str:
    """
    Return a temporary download link for a stored payment proof.
    """
    result = _bucket().create_signed_url(path, expires_in)
    return result["signedURL"]


def build_proof_filename(user_id: str, epoch_ms: int, ext: str) -> str:
    """
    Object name for an uploaded payment proof.

    Example:
        "3f2c...e1_1704891600000.pdf"
    """
    return f"{user_id}_{epoch_ms}.{ext}"
