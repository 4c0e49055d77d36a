from __future__ import annotations

import logging
from collections.abc import Sequence

from wcmatch import glob

from ai_pr_review.review.models import DiffFile

logger = logging.getLogger(__name__)


def is_excluded(path: str, patterns: Sequence[str]) -> bool:
    """`**` 匹配零或多级目录（`**/*.md` 也命中根目录的 README.md），`*` 只匹配一级。"""
    for pattern in patterns:
        if glob.globmatch(path, pattern, flags=glob.GLOBSTAR):
            return True
    return False


def filter_excluded_files(files: Sequence[DiffFile], patterns: Sequence[str]) -> list[DiffFile]:
    """去掉目标路径命中任一 exclude glob 的文件（在 orchestrator 处理之前做）。"""
    kept: list[DiffFile] = []
    for f in files:
        if is_excluded(f.to_path, patterns):
            logger.info(f"Excluded by pattern: {f.to_path}")
            continue
        kept.append(f)
    return kept
