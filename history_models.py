import base64
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from history_config import PREVIEW_LINES
from history_errors import StorageError


@dataclass(frozen=True)
class TextPayload:
    """文本内容，不允许为空字符串"""
    value: str

    kind = "text"

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value:
            raise ValueError("文本内容不能为空")

    def preview(self, max_lines=PREVIEW_LINES):
        """只保留前几行，空行也算一行"""
        return "\n".join(self.value.split("\n")[:max_lines])

    def write_to(self, backend):
        # 后端写入时自行替换原有内容，写入失败则剪贴板保持不变
        backend.write_text(self.value)

    def to_dict(self):
        return {"type": self.kind, "value": self.value}


@dataclass(frozen=True)
class ImagePayload:
    """图片内容，原始字节（TIFF、DIB、PNG 等），不做解析或转换"""
    data: bytes

    kind = "image"

    def __post_init__(self):
        if not isinstance(self.data, (bytes, bytearray)) or not self.data:
            raise ValueError("图片数据不能为空")
        if isinstance(self.data, bytearray):
            object.__setattr__(self, "data", bytes(self.data))

    def preview(self, max_lines=PREVIEW_LINES):
        return f"[image, {len(self.data)} bytes]"

    def write_to(self, backend):
        backend.write_image_bytes(self.data)

    def to_dict(self):
        return {
            "type": self.kind,
            "bytes": base64.b64encode(self.data).decode("ascii"),
        }


def payload_from_dict(data):
    """按 type 字段还原内容"""
    kind = data.get("type")
    if kind == TextPayload.kind:
        return TextPayload(data["value"])
    if kind == ImagePayload.kind:
        return ImagePayload(base64.b64decode(data["bytes"], validate=True))
    raise StorageError(f"未知的内容类型: {kind!r}")


def classify_text(text):
    if isinstance(text, str) and text:
        return TextPayload(text)
    return None


def classify_image(data):
    if data:
        return ImagePayload(bytes(data))
    return None


def read_payload(backend):
    """读取剪贴板当前内容：先文本后图片，都为空时返回 None"""
    payload = classify_text(backend.read_text())
    if payload is None:
        payload = classify_image(backend.read_image_bytes())
    return payload


def _now():
    return datetime.now(timezone.utc)


def format_timestamp(value):
    return value.isoformat()


def parse_timestamp(text):
    # 兼容以 Z 结尾的 UTC 时间
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class HistoryEntry:
    """一条历史记录，创建后不可修改"""
    content: object
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=_now)

    def to_dict(self):
        return {
            "id": self.id,
            "date": format_timestamp(self.timestamp),
            "content": self.content.to_dict(),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data["id"]),
            timestamp=parse_timestamp(data["date"]),
            content=payload_from_dict(data["content"]),
        )
