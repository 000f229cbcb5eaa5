"""
文件上传 API 路由
保存到 UPLOADS_DIR，通过 /uploads 静态目录对外提供
"""

import logging
import os
import uuid

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_roles
from app.config import settings
from app.core.errors import BadRequest
from app.database.connection import get_db
from app.models.media import Media
from app.models.user import User, WRITER_ROLES
from app.schemas.media import MediaResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/upload", tags=["文件上传"])

# 允许的图片类型 -> 扩展名
_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


@router.post("", response_model=list[MediaResponse], summary="上传图片")
async def upload_files(
    files: list[UploadFile] = File(...),
    db: AsyncSession = Depends(get_db),
    viewer: User = Depends(require_roles(*WRITER_ROLES)),
):
    """上传一张或多张图片，返回媒体记录列表"""
    os.makedirs(settings.UPLOADS_DIR, exist_ok=True)

    # 先校验并读取全部文件，任何一个不合法都不落盘
    accepted = []
    for upload in files:
        ext = _IMAGE_TYPES.get(upload.content_type or "")
        if ext is None:
            raise BadRequest(f"不支持的文件类型: {upload.content_type}")

        data = await upload.read()
        if len(data) > settings.UPLOAD_MAX_BYTES:
            raise BadRequest(f"文件过大: {upload.filename}")
        accepted.append((upload, ext, data))

    written = []
    saved = []
    try:
        for upload, ext, data in accepted:
            filename = f"{uuid.uuid4().hex}{ext}"
            path = os.path.join(settings.UPLOADS_DIR, filename)
            with open(path, "wb") as f:
                f.write(data)
            written.append(path)

            media = Media(
                name=upload.filename or filename,
                url=f"/uploads/{filename}",
                mime=upload.content_type,
                size=len(data),
                uploaded_by_id=viewer.id,
            )
            db.add(media)
            saved.append(media)

        await db.commit()
    except Exception:
        # 写盘或入库失败时删除本次已写入的文件，避免留下无记录的孤儿文件
        for path in written:
            if os.path.exists(path):
                os.remove(path)
        logger.error(f"上传失败，已清理 {len(written)} 个文件")
        raise

    for media in saved:
        await db.refresh(media)

    logger.info(f"上传文件 {len(saved)} 个: user={viewer.id}")
    return saved
