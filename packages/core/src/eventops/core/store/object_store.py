"""ObjectStore 文件系统实现

对象写入 root/bucket/path，公开 URL 为 public_base_url/bucket/path。
"""

import asyncio
from pathlib import Path, PurePosixPath

from ..exceptions import PersistenceError


def _safe_relative_path(path: str) -> PurePosixPath:
    """校验对象路径：必须是相对路径且不含 .. 段"""
    candidate = PurePosixPath(path)
    if not path or candidate.is_absolute() or ".." in candidate.parts:
        raise PersistenceError(f"Invalid object path: {path!r}")
    return candidate


class FileObjectStore:
    """ObjectStore 的文件系统实现"""

    def __init__(self, root: Path, public_base_url: str, bucket: str) -> None:
        self._root = root
        self._public_base_url = public_base_url.rstrip("/")
        self._bucket = bucket

    async def upload(self, path: str, content: bytes, content_type: str) -> None:
        """写入对象内容

        content_type 由调用方记录在附件元数据中，此处不单独保存。
        """
        file_path = self.local_path(path)
        try:
            await asyncio.to_thread(self._write, file_path, content)
        except OSError as e:
            raise PersistenceError(str(e), original_error=e) from e

    def get_public_url(self, path: str) -> str:
        """获取对象的公开访问 URL"""
        relative = _safe_relative_path(path)
        return f"{self._public_base_url}/{self._bucket}/{relative.as_posix()}"

    def local_path(self, path: str) -> Path:
        """对象在本地文件系统中的路径"""
        relative = _safe_relative_path(path)
        return self._root / self._bucket / Path(*relative.parts)

    @staticmethod
    def _write(file_path: Path, content: bytes) -> None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(content)
