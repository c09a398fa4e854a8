import stat
import sys
import threading
import pytest
import yaml
from pathlib import Path
from batchmux.config.models import AppConfig
from batchmux.domain.errors import TranscodeError
from batchmux.infrastructure.event_bus import EventBus

# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_config():
    """Returns a sample AppConfig object for testing."""
    return AppConfig(
        general={
            "workers": 2,
            "recursive": False,
            "source_extension": ".mkv",
            "target_extension": ".mp4",
            "verbose": False,
            "log_path": None,
            "debug": False,
        },
        ffmpeg={
            "binary": "ffmpeg",
            "overwrite": False,
            "extra_args": [],
        },
    )

@pytest.fixture
def config_yaml_path(tmp_path):
    """Creates a temporary YAML config file."""
    conf_dir = tmp_path / "conf"
    conf_dir.mkdir()
    conf_file = conf_dir / "batchmux.yaml"

    content = {
        'general': {
            'workers': 3,
            'recursive': True,
            'source_extension': 'mkv',
            'target_extension': 'mp4',
            'debug': False,
        },
        'ffmpeg': {
            'binary': '/usr/local/bin/ffmpeg',
            'overwrite': True,
            'extra_args': ['-map', '0'],
        }
    }

    with open(conf_file, 'w') as f:
        yaml.dump(content, f)

    return conf_file

# ============================================================================
# EventBus Fixtures
# ============================================================================

@pytest.fixture
def event_bus():
    """Returns a fresh EventBus instance."""
    return EventBus()

# ============================================================================
# File System Fixtures
# ============================================================================

@pytest.fixture
def media_tree(tmp_path):
    """Creates a directory with a.mkv, b.mkv, notes.txt and sub/c.mkv."""
    root = tmp_path / "media"
    root.mkdir()
    for name in ("a.mkv", "b.mkv"):
        (root / name).write_bytes(b"matroska " * 10)
    (root / "notes.txt").write_text("not a video")
    sub = root / "sub"
    sub.mkdir()
    (sub / "c.mkv").write_bytes(b"matroska " * 10)
    return root

# ============================================================================
# Transcoder Fakes
# ============================================================================

class FakeTranscoder:
    """Deterministic stand-in for ffmpeg.

    Copies input to output unless the input path is listed in `fail_on`.
    `delay` makes every call sleep, `gate` makes every call block until set.
    """

    def __init__(self, fail_on=(), delay=0.0, gate=None):
        self.fail_on = {str(p) for p in fail_on}
        self.delay = delay
        self.gate = gate
        self.calls = []
        self.threads = set()
        self._lock = threading.Lock()

    def __call__(self, input_path, output_path):
        with self._lock:
            self.calls.append((str(input_path), str(output_path)))
            self.threads.add(threading.current_thread().name)
        if self.gate is not None:
            self.gate.wait(5)
        if self.delay:
            threading.Event().wait(self.delay)
        if str(input_path) in self.fail_on:
            raise TranscodeError("ffmpeg exited with code 1", returncode=1)
        Path(output_path).write_bytes(Path(input_path).read_bytes())

    @property
    def inputs(self):
        with self._lock:
            return [c[0] for c in self.calls]


@pytest.fixture
def fake_transcoder():
    return FakeTranscoder()


@pytest.fixture
def transcoder_factory():
    """Returns the FakeTranscoder class for tests that need custom behaviour."""
    return FakeTranscoder


@pytest.fixture
def fake_ffmpeg_bin(tmp_path):
    """Writes a shell script that behaves like `ffmpeg -i IN ... OUT` by copying."""
    if sys.platform.startswith("win"):
        pytest.skip("fake ffmpeg script requires a POSIX shell")
    script = tmp_path / "bin" / "ffmpeg"
    script.parent.mkdir()
    script.write_text(
        "#!/bin/sh\n"
        "in=\"\"\n"
        "out=\"\"\n"
        "while [ $# -gt 0 ]; do\n"
        "  case \"$1\" in\n"
        "    -i) in=\"$2\"; shift 2 ;;\n"
        "    *) out=\"$1\"; shift ;;\n"
        "  esac\n"
        "done\n"
        "case \"$(basename \"$in\")\" in\n"
        "  broken*) echo \"$in: Invalid data found when processing input\" >&2; exit 1 ;;\n"
        "esac\n"
        "cp \"$in\" \"$out\"\n"
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script

# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
