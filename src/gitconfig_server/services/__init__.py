from .assembler import ConfigAssembler, candidate_filenames, flatten, parse_profiles
from .config_service import ConfigService, FileContent
from .mirror import GitMirrorManager
from .template import TemplateEngine

__all__ = [
    "ConfigAssembler",
    "ConfigService",
    "FileContent",
    "GitMirrorManager",
    "TemplateEngine",
    "candidate_filenames",
    "flatten",
    "parse_profiles",
]
