"""
Catalogue of training modules and session types that feedback is recorded against.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Session:
    id: str
    name: str


@dataclass(frozen=True)
class Module:
    id: str
    name: str
    type: str
    sessions: Tuple[Session, ...]


_STANDARD_SESSIONS = (
    Session(id="lecture", name="Lecture"),
    Session(id="social", name="Social"),
)

MODULES: Tuple[Module, ...] = (
    Module("ethics", "Ethics", "Vanguard Core Module", _STANDARD_SESSIONS),
    Module("empathy", "Empathy", "Vanguard Core Module", _STANDARD_SESSIONS),
    Module("communication", "Communication", "Vanguard Core Module", _STANDARD_SESSIONS),
    Module("thinking", "Thinking", "Vanguard Core Module", _STANDARD_SESSIONS),
    Module("time-management", "Time Management", "Vanguard Core Module", _STANDARD_SESSIONS),
    Module("the-grand-spectrum", "The Grand Spectrum", "Vanguard Special Module", _STANDARD_SESSIONS),
)


def get_module(module_id: str) -> Optional[Module]:
    """
    Find a module by id (case-insensitive).

    Args:
        module_id: Module identifier such as "ethics"

    Returns:
        Module or None if the id is not in the catalogue
    """
    wanted = (module_id or "").strip().lower()
    for module in MODULES:
        if module.id == wanted:
            return module
    return None


def get_module_ids() -> List[str]:
    return [module.id for module in MODULES]


def get_session_types() -> List[str]:
    """All session type ids offered by any module, in catalogue order."""
    seen: List[str] = []
    for module in MODULES:
        for session in module.sessions:
            if session.id not in seen:
                seen.append(session.id)
    return seen
