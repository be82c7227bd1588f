from .context import UploadContext
