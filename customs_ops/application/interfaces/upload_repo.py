from customs_ops.domain.entities.upload import Upload


class UploadRepo:
    async def add(self, upload: Upload) -> Upload:
        raise NotImplementedError

    async def get(self, upload_id: int, user_id: str) -> Upload | None:
        raise NotImplementedError

    async def save(self, upload: Upload) -> None:
        raise NotImplementedError
