"""Data models for crawl state and the session dataset."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


@dataclass(frozen=True)
class ReportUrl:
    source_url: str
    file_path: str

    def to_dict(self) -> dict:
        return {"sourceUrl": self.source_url, "filePath": self.file_path}

    @classmethod
    def from_dict(cls, data: dict) -> "ReportUrl":
        return cls(source_url=data["sourceUrl"], file_path=data["filePath"])


@dataclass(frozen=True)
class Document:
    text: str
    href: str

    def to_dict(self) -> dict:
        return {"text": self.text, "href": self.href}


class AssemblyType(Enum):
    HOUSE_OF_REPRESENTATIVES = "สภาผู้แทนราษฎร"
    NATIONAL_ASSEMBLY = "รัฐสภา"
    NATIONAL_LEGISLATIVE_ASSEMBLY = "สภานิติบัญญัติแห่งชาติ"
    CONSTITUTION_DRAFTING_ASSEMBLY = "สภาร่างรัฐธรรมนูญ"
    NATIONAL_REFORM_COUNCIL = "สภาปฏิรูปแห่งชาติ"
    NATIONAL_REFORM_STEERING_ASSEMBLY = "สภาขับเคลื่อนการปฏิรูปประเทศ"

    @property
    def english_name(self) -> str:
        return ENGLISH_NAMES[self]


ENGLISH_NAMES = {
    AssemblyType.HOUSE_OF_REPRESENTATIVES: "House of Representatives",
    AssemblyType.NATIONAL_ASSEMBLY: "National Assembly",
    AssemblyType.NATIONAL_LEGISLATIVE_ASSEMBLY: "National Legislative Assembly",
    AssemblyType.CONSTITUTION_DRAFTING_ASSEMBLY: "Constitution Drafting Assembly",
    AssemblyType.NATIONAL_REFORM_COUNCIL: "National Reform Council",
    AssemblyType.NATIONAL_REFORM_STEERING_ASSEMBLY: "National Reform Steering Assembly",
}


@dataclass
class AssemblySession:
    essemble: AssemblyType
    session_info: List[str]
    source_url: str
    file_path: str
    date: Optional[str] = None
    documents: List[Document] = field(default_factory=list)
    session_id: str = ""

    @property
    def breadcrumb(self) -> List[str]:
        """Session labels without the trailing date line."""
        return self.session_info[:-1]

    def to_dict(self) -> dict:
        data = {
            "sessionId": self.session_id,
            "sourceUrl": self.source_url,
            "filePath": self.file_path,
            "essembleName": self.essemble.value,
            "sessionInfo": list(self.session_info),
            "documents": [d.to_dict() for d in self.documents],
        }
        if self.date is not None:
            data["date"] = self.date
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AssemblySession":
        return cls(
            essemble=AssemblyType(data["essembleName"]),
            session_info=list(data.get("sessionInfo", [])),
            source_url=data["sourceUrl"],
            file_path=data["filePath"],
            date=data.get("date"),
            documents=[Document(d["text"], d["href"]) for d in data.get("documents", [])],
            session_id=data.get("sessionId", ""),
        )


@dataclass
class UnresolvedRecord:
    source_url: str
    file_path: str
    reason: str

    def to_dict(self) -> dict:
        return {"sourceUrl": self.source_url, "filePath": self.file_path, "error": self.reason}


SessionRecord = Union[AssemblySession, UnresolvedRecord]


def record_from_dict(data: dict) -> SessionRecord:
    if "error" in data:
        return UnresolvedRecord(data["sourceUrl"], data["filePath"], data["error"])
    return AssemblySession.from_dict(data)
