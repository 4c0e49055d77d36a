"""
Chunk 级 review prompt。

约定：
- 每个 hunk 单独一个 prompt（不截断；超出模型上下文由 LLM 调用方报错）
- diff 每一行前面标注行号，和 `positions.build_position_index` 用的是同一套行号，
  这样模型回复的 lineNumber 才能映射回 position
"""

from __future__ import annotations

from ai_pr_review.review.models import DiffChunk
from ai_pr_review.review.models import DiffFile
from ai_pr_review.review.models import PRContext
from ai_pr_review.review.positions import relevant_line_number


def _review_instructions() -> str:
    return (
        "Your task is to review pull requests. Instructions:\n"
        "- Provide a JSON array of review comments in the following format. "
        "Return the JSON inside a markdown code block:\n"
        "  ```json\n"
        "  {\n"
        '    "reviews": [\n'
        "      {\n"
        '        "lineNumber": "Line number where the issue is found",\n'
        '        "reviewComment": "Your review comment"\n'
        "      }\n"
        "    ]\n"
        "  }\n"
        "  ```\n"
        "- Only provide the JSON output inside the code block and nothing else.\n"
        "- Do not give positive comments or compliments, be critical.\n"
        "- IMPORTANT: only comment on performance, typos or best practices. Not on possible side effects.\n"
        "- Write the comment in GitHub Markdown format.\n"
        "- Always propose a code solution to the issue.\n"
        "- Don't check package imports.\n"
        "- Don't suggest adding comments.\n"
    )


def _annotate_chunk_lines(chunk: DiffChunk) -> str:
    return "\n".join(f"{relevant_line_number(change)} {change.content}" for change in chunk.changes)


def build_review_prompt(file: DiffFile, chunk: DiffChunk, pr: PRContext) -> str:
    """拼出单个 chunk 的完整 prompt：固定指令 + 文件路径 + PR 标题/描述 + 带行号的 diff。"""
    return (
        f"{_review_instructions()}\n"
        f'Review the following code diff in the file "{file.to_path}" and take the pull request '
        "title and description into account when writing the response.\n\n"
        f"Pull request title: {pr.title}\n"
        "Pull request description:\n\n"
        "---\n"
        f"{pr.description}\n"
        "---\n\n"
        "Git diff to review:\n\n"
        "```diff\n"
        f"{chunk.header}\n"
        f"{_annotate_chunk_lines(chunk)}\n"
        "```\n"
    )
