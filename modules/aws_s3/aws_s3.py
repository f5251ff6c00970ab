import boto3
import hashlib
import io
import os
from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv

from logger import logger

load_dotenv()

AWS_ACCESS_KEY = os.environ.get("AWS_ACCESS_KEY")
AWS_SECRET_KEY = os.environ.get("AWS_SECRET_KEY")
S3_BUCKET_NAME = os.environ.get("S3_BUCKET_NAME")
REGION_NAME = os.environ.get("REGION_NAME")

# Initialize the S3 client
s3_client = boto3.client(
    "s3",
    aws_access_key_id=AWS_ACCESS_KEY,
    aws_secret_access_key=AWS_SECRET_KEY,
    region_name=REGION_NAME,
)

# document type -> folder in the bucket
DOCUMENT_FOLDERS = {
    "epod": "epod",
    "sorter_image": "sorter-images",
    "qc_image": "qc-images",
}


def upload_bytes_to_s3(
    content: bytes,
    s3_key: str,
    content_type: str = "application/octet-stream",
) -> dict:
    """
    Upload bytes content to S3.

    Args:
        content: Bytes content to upload
        s3_key: The S3 key (path) where the file will be stored
        content_type: MIME type of the file

    Returns:
        dict with success status, URL, s3_key, and file_size or error
    """
    try:
        file_obj = io.BytesIO(content)

        s3_client.upload_fileobj(
            Fileobj=file_obj,
            Bucket=S3_BUCKET_NAME,
            Key=s3_key,
            ExtraArgs={"ContentType": content_type},
        )

        file_url = build_s3_url(s3_key)

        return {
            "success": True,
            "url": file_url,
            "s3_key": s3_key,
            "file_size": len(content),
        }

    except (BotoCoreError, ClientError) as e:
        logger.error(msg=f"S3 bytes upload failed: {str(e)}")
        return {"success": False, "error": str(e)}


def build_s3_url(s3_key: str) -> str:
    return f"https://{S3_BUCKET_NAME}.s3.amazonaws.com/{s3_key}"


def build_document_s3_key(
    document_type: str, waybill: str, content: bytes, extension: str = "jpg"
) -> str:
    """
    {folder}/{waybill}/{sha256 of content}.{extension}, folder picked by document type.
    The same image always lands on the same key.
    """
    folder = DOCUMENT_FOLDERS.get(document_type, "documents")
    digest = hashlib.sha256(content).hexdigest()

    return f"{folder}/{waybill}/{digest}.{extension}"
