# portal/schemas/attendance.py
import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class AttendanceRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    date: Optional[datetime.date] = None
    course: Optional[str] = None
    # Each block: "On Time", "...Tardy...", "...Absent..." or None when not held
    block_a: Optional[str] = Field(default=None, alias="blockA")
    block_b: Optional[str] = Field(default=None, alias="blockB")
    block_c: Optional[str] = Field(default=None, alias="blockC")
    block_d: Optional[str] = Field(default=None, alias="blockD")

    @property
    def blocks(self) -> List[Optional[str]]:
        return [self.block_a, self.block_b, self.block_c, self.block_d]


class AttendanceSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_blocks: int = Field(default=0, alias="totalBlocks")
    on_time_blocks: int = Field(default=0, alias="onTimeBlocks")
    tardy_blocks: int = Field(default=0, alias="tardyBlocks")
    absent_blocks: int = Field(default=0, alias="absentBlocks")
    attendance_rate: int = Field(default=0, alias="attendanceRate")
    zone: Literal["green", "yellow", "red"] = "green"


class AttendanceResponse(BaseModel):
    success: bool = True
    records: List[AttendanceRecord]
    summary: AttendanceSummary
