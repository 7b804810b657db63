import copy

from customs_ops.application.interfaces.upload_repo import UploadRepo
from customs_ops.domain.entities.upload import Upload


class InMemoryUploadRepo(UploadRepo):
    def __init__(self) -> None:
        self._uploads: dict[int, Upload] = {}
        self._next_id = 1

    async def add(self, upload: Upload) -> Upload:
        upload.id = self._next_id
        self._uploads[self._next_id] = copy.deepcopy(upload)
        self._next_id += 1
        return upload

    async def get(self, upload_id: int, user_id: str) -> Upload | None:
        upload = self._uploads.get(upload_id)
        if not upload or upload.user_id != user_id:
            return None
        return copy.deepcopy(upload)

    async def save(self, upload: Upload) -> None:
        self._uploads[upload.id] = copy.deepcopy(upload)
