import math
from typing import Optional

from tweetvid.models.response import FormatDescriptor


def format_file_size(size: Optional[int]) -> str:
    if not size:
        return "Unknown size"
    return f"{size / (1024 * 1024):.2f} MB"


def format_duration(seconds: Optional[float]) -> str:
    if not seconds:
        return "Unknown"
    mins = math.floor(seconds / 60)
    secs = math.floor(seconds % 60)
    return f"{mins}:{secs:02d}"


def format_option_label(fmt: FormatDescriptor) -> str:
    label = f"{fmt.quality} - {(fmt.ext or '').upper()}"
    if fmt.filesize:
        label += f" ({format_file_size(fmt.filesize)})"
    return label
