from pydantic import BaseModel


class FileUpload(BaseModel):
    """An uploaded file read into memory, ready to hand to the blob store."""
    filename: str
    content_type: str = "application/octet-stream"
    data: bytes
