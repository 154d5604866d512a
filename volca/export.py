"""Write modified patterns to ``.dat`` files and hand them to the syro encoder.

The Korg Syro SDK ships a command line encoder per platform which takes the
output ``.wav`` path followed by one ``pNN:<file>`` token per pattern file and
writes a single audio stream that the Volca Sample loads through SYNC IN.
"""

from __future__ import annotations

import platform
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import EncoderError, IOFailure, InvalidSelector, UnsupportedPlatform
from .layout import encode_pattern
from .params import PATTERN_COUNT

if TYPE_CHECKING:
    from .project import Project


DAT_SUFFIX = ".dat"
STREAM_SUFFIX = ".wav"

# (platform.system(), platform.machine()) -> encoder executable name
ENCODER_BINARIES: Dict[Tuple[str, str], str] = {
    ("Linux", "x86_64"): "syro_volcasample_linux.x86_64",
    ("Linux", "amd64"): "syro_volcasample_linux.x86_64",
    ("Linux", "i686"): "syro_volcasample_linux.i686",
    ("Linux", "i386"): "syro_volcasample_linux.i686",
}


@dataclass
class ExportResult:
    files: Dict[int, Path]  # pattern number -> .dat path, ascending
    stream: Optional[Path] = None
    command: List[str] = field(default_factory=list)

    @property
    def patterns(self) -> List[int]:
        return list(self.files)


def list_modified_patterns(project: "Project") -> List[int]:
    return project.list_modified_patterns()


def pattern_token(number: int) -> str:
    if not (1 <= number <= PATTERN_COUNT):
        raise InvalidSelector(f"pattern number {number} out of bounds (should be between 1 & {PATTERN_COUNT})")
    return f"p{number:02d}"


def pattern_filename(base_name: Path | str, number: int) -> Path:
    base = Path(base_name)
    return base.with_name(f"{base.name}_{pattern_token(number)}{DAT_SUFFIX}")


def stream_filename(base_name: Path | str) -> Path:
    base = Path(base_name)
    return base.with_name(base.name + STREAM_SUFFIX)


def write_patterns(
    project: "Project",
    base_name: Path | str,
    numbers: Optional[Sequence[int]] = None,
) -> Dict[int, Path]:
    """Write one ``.dat`` file per pattern and return ``{number: path}``.

    `numbers` defaults to the modified patterns.  Files written before an
    I/O error are left on disk.
    """

    if numbers is None:
        numbers = project.list_modified_patterns()
    written: Dict[int, Path] = {}
    for number in sorted(numbers):
        path = pattern_filename(base_name, number)
        data = encode_pattern(project.pattern(number))
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            raise IOFailure(f"cannot write pattern {number} to {path}: {exc}") from exc
        written[number] = path
    return written


def find_encoder(
    encoder: Path | str | None = None,
    *,
    system: str | None = None,
    machine: str | None = None,
    search_dir: Path | str | None = None,
) -> Path:
    """Locate the syro encoder executable.

    An explicit `encoder` path wins.  Otherwise the platform's binary name is
    looked up in `search_dir` (default: current directory) and then on PATH.
    """

    if encoder is not None:
        path = Path(encoder).expanduser()
        if not path.is_file():
            raise UnsupportedPlatform(f"syro encoder not found at {path}")
        # subprocess only searches PATH for a bare name, never the cwd
        return path.resolve()

    system = system if system is not None else platform.system()
    machine = machine if machine is not None else platform.machine()
    name = ENCODER_BINARIES.get((system, machine.lower()))
    if name is None:
        raise UnsupportedPlatform(f"no syro encoder available for {system}/{machine}")

    local = Path(search_dir if search_dir is not None else Path.cwd()) / name
    if local.is_file():
        return local.resolve()
    found = shutil.which(name)
    if found is None:
        raise UnsupportedPlatform(f"syro encoder {name!r} not found in {local.parent} or on PATH")
    return Path(found)


def encoder_command(encoder: Path | str, stream: Path | str, files: Mapping[int, Path]) -> List[str]:
    tokens = [f"{pattern_token(number)}:{files[number]}" for number in sorted(files)]
    return [str(encoder), str(stream), *tokens]


def invoke_encoder(command: Sequence[str]) -> None:
    try:
        proc = subprocess.run(list(command), capture_output=True, text=True, check=False)
    except OSError as exc:
        raise UnsupportedPlatform(f"cannot run syro encoder {command[0]!r}: {exc}") from exc
    if proc.returncode != 0:
        detail = (proc.stderr or proc.stdout).strip()
        raise EncoderError(
            f"syro encoder exited with status {proc.returncode}" + (f": {detail}" if detail else ""),
            returncode=proc.returncode,
        )


def export(
    project: "Project",
    base_name: Path | str,
    *,
    encoder: Path | str | None = None,
    run_encoder: bool = True,
) -> ExportResult:
    """Write every modified pattern and, optionally, build the syro stream.

    With nothing modified this is a no-op: no files are written and no
    encoder is looked up.  Otherwise the encoder is located before any file
    is written.  Dirty counters are left as they are, so exporting again
    re-emits the same patterns.
    """

    if not project.list_modified_patterns():
        return ExportResult(files={})
    encoder_path = find_encoder(encoder) if run_encoder else None
    files = write_patterns(project, base_name)
    result = ExportResult(files=files)
    if encoder_path is None or not files:
        return result

    stream = stream_filename(base_name)
    result.stream = stream
    result.command = encoder_command(encoder_path, stream, files)
    invoke_encoder(result.command)
    return result


__all__ = [
    "ENCODER_BINARIES",
    "ExportResult",
    "encoder_command",
    "export",
    "find_encoder",
    "invoke_encoder",
    "list_modified_patterns",
    "pattern_filename",
    "pattern_token",
    "stream_filename",
    "write_patterns",
]
