from functools import cached_property
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .utils import split_sql


@dataclass(eq=False)
class Migration:
    version: int
    name: str
    up_path: Optional[Path] = None
    down_path: Optional[Path] = None

    def __hash__(self) -> int:
        return hash(self.version)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Migration):
            return NotImplemented
        return self.version == other.version

    def __str__(self) -> str:
        return f"{self.version}/{self.name}" if self.name else str(self.version)

    @cached_property
    def up_script(self) -> Optional[str]:
        if self.up_path is None:
            return None
        return self.up_path.read_text("utf-8")

    @cached_property
    def down_script(self) -> Optional[str]:
        if self.down_path is None:
            return None
        return self.down_path.read_text("utf-8")

    @cached_property
    def commands_of_up_script(self) -> List[str]:
        return split_sql(self.up_script) if self.up_script else []

    @cached_property
    def commands_of_down_script(self) -> List[str]:
        return split_sql(self.down_script) if self.down_script else []
