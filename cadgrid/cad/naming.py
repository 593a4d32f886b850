"""
文件名清洗 - 标签文本转为安全文件名
"""

from __future__ import annotations

import re

_RESERVED_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def sanitize_filename(text: str) -> str:
    """
    标签文本转文件名

    保留字符（< > : " / \\ | ? * 及控制字符）替换为下划线，
    去除首尾空白和末尾的点
    """
    name = _RESERVED_CHARS.sub("_", text or "")
    return name.strip().rstrip(".").strip()


def unique_name(name: str, used: set[str]) -> str:
    """同一次运行内重名时追加 _2/_3...（不区分大小写）"""
    candidate = name
    index = 2
    while candidate.lower() in used:
        candidate = f"{name}_{index}"
        index += 1
    used.add(candidate.lower())
    return candidate
