"""
Review 领域模型（Pydantic）。

用途：
- 明确 diff 解析 -> prompt -> LLM -> 行内评论 各阶段的数据结构
- 作为 LLM JSON 输出的 schema 校验（`ReviewResponse`）

注意：
- `LineNumber`（diff 指令给出的源文件行号）和 `DiffPosition`（hunk 内的序号）是两套编号，
  不能混用，所以定义成两个独立的 NewType。
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, NewType, Union

from pydantic import BaseModel, ConfigDict, Field

DEV_NULL = "/dev/null"

LineNumber = NewType("LineNumber", int)
DiffPosition = NewType("DiffPosition", int)

PositionIndex = dict[LineNumber, DiffPosition]


class AdditionChange(BaseModel):
    """新增行：line_number 是新文件中的行号。"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["add"] = "add"
    line_number: LineNumber
    content: str


class DeletionChange(BaseModel):
    """删除行：line_number 是旧文件中的行号。"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["del"] = "del"
    line_number: LineNumber
    content: str


class ContextChange(BaseModel):
    """上下文行（未改动）：同时带旧/新文件行号。"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["normal"] = "normal"
    old_line_number: LineNumber
    new_line_number: LineNumber
    content: str


LineChange = Annotated[
    Union[AdditionChange, DeletionChange, ContextChange],
    Field(discriminator="kind"),
]


class DiffChunk(BaseModel):
    """一个 hunk：`@@ ... @@` 头 + 按 diff 顺序排列的行。"""

    model_config = ConfigDict(frozen=True)

    header: str
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    changes: list[LineChange] = Field(default_factory=list)


class DiffFile(BaseModel):
    """单个文件的 diff。新建文件 from_path 为 /dev/null，删除文件 to_path 为 /dev/null。"""

    model_config = ConfigDict(frozen=True)

    from_path: str
    to_path: str
    chunks: list[DiffChunk] = Field(default_factory=list)
    is_new: bool = False
    is_deleted: bool = False
    additions: int = 0
    deletions: int = 0


class PRContext(BaseModel):
    """一次 PR review 的只读上下文（prompt 构造 + 最终提交 review 用）。"""

    model_config = ConfigDict(frozen=True)

    owner: str
    repo: str
    pull_number: int
    title: str
    description: str
    commit_id: str


class ReviewFinding(BaseModel):
    """
    模型返回的单条建议（尚未和 diff position 对齐）。

    lineNumber 来自模型，可能是字符串也可能是数字，这里统一转成文本，
    真正的整数转换放在 assembler 里（失败只丢弃这一条）。
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, coerce_numbers_to_str=True)

    line_number: str = Field(alias="lineNumber")
    review_comment: str = Field(alias="reviewComment")


class ReviewResponse(BaseModel):
    """LLM 输出 schema：`{"reviews": [...]}`。每一条在 extractor 里单独校验，坏一条不影响其它。"""

    reviews: list[Any]


class ReviewComment(BaseModel):
    """最终写回 GitHub 的行内评论（position 寻址）。"""

    model_config = ConfigDict(frozen=True)

    path: str
    position: DiffPosition
    body: str
