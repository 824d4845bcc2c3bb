import os
import uuid
from urllib.parse import urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError
from flask import current_app
from werkzeug.utils import secure_filename


class UploadError(Exception):
    """Raised when a contract file cannot be stored."""


def _client():
    return boto3.client(
        "s3",
        aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        region_name=current_app.config.get("S3_REGION"),
    )


def file_extension(filename):
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def contract_key(booking_id, filename):
    """Object key for a booking's contract; unique per upload."""
    return f"contracts/{booking_id}/{uuid.uuid4().hex}_{secure_filename(filename)}"


def _base_url():
    base_url = current_app.config.get("S3_BASE_URL")
    if base_url:
        return base_url.rstrip("/")
    bucket = current_app.config.get("S3_BUCKET_NAME")
    return f"https://{bucket}.s3.amazonaws.com"


def public_url(key):
    return f"{_base_url()}/{key}"


def key_from_url(file_url):
    """Inverse of public_url; URLs under another base fall back to the path."""
    prefix = f"{_base_url()}/"
    if file_url.startswith(prefix):
        return file_url[len(prefix):]
    return urlparse(file_url).path.lstrip("/")


def upload_file_to_s3(file, key, bucket_name, content_type=None):
    extra_args = {}
    if content_type:
        extra_args["ContentType"] = content_type
    try:
        _client().upload_fileobj(file, bucket_name, key, ExtraArgs=extra_args)
    except NoCredentialsError:
        raise UploadError("AWS credentials not found. Check environment variables.")
    except (BotoCoreError, ClientError) as e:
        raise UploadError(f"S3 upload failed: {e}")
    return public_url(key)


def delete_file_from_s3(file_url, bucket_name):
    key = key_from_url(file_url)
    try:
        _client().delete_object(Bucket=bucket_name, Key=key)
        return True
    except NoCredentialsError:
        raise UploadError("AWS credentials not found. Check environment variables.")
    except (BotoCoreError, ClientError) as e:
        current_app.logger.warning(f"Error deleting file from S3: {e}")
        return False
