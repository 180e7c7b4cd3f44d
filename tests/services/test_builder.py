import io
import os
import subprocess

import pytest
from rich.console import Console

from sfdeploy.errors import DeployError, ErrorKind
from sfdeploy.host import LINUX, WINDOWS
from sfdeploy.models import DeployConfig
from sfdeploy.services.builder import BuildService
from sfdeploy.services.filesystem import FileSystemService


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def info(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


class FakeRunner:
    def __init__(self, returncodes=None):
        self.returncodes = returncodes or {}
        self.calls = []

    def run(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        tool = os.path.basename(cmd[0])
        code = self.returncodes.get(tool, 0)
        return subprocess.CompletedProcess(cmd, code, stdout=f"{tool} output", stderr=None)


def _service(runner, host=LINUX):
    logger = DummyLogger()
    console = Console(file=io.StringIO())
    return BuildService(
        host=host,
        command_runner=runner,
        filesystem_service=FileSystemService(logger=logger, console=console),
        logger=logger,
        console=console,
    )


def _project(tmp_path, sources=("com/game/Main.java",)):
    source_root = tmp_path / "project"
    for relative in sources:
        path = source_root / "src" / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("class X {}", encoding="utf-8")
    (source_root / "src").mkdir(parents=True, exist_ok=True)

    target_root = tmp_path / "server"
    (target_root / "SFS2X" / "lib").mkdir(parents=True)

    return DeployConfig(
        source_root=str(source_root),
        target_root=str(target_root),
        extension_name="MyExtension",
        toolchain_path="/jdk/bin",
    )


def test_build_fails_without_sources_and_never_compiles(tmp_path):
    runner = FakeRunner()
    config = _project(tmp_path, sources=())

    with pytest.raises(DeployError) as error:
        _service(runner).build(config)

    assert error.value.kind is ErrorKind.BUILD
    assert runner.calls == []


def test_build_removes_stale_class_files_first(tmp_path):
    config = _project(tmp_path)
    stale = os.path.join(config.sources_dir, "com", "game", "Old.class")
    with open(stale, "w", encoding="utf-8") as file_obj:
        file_obj.write("stale")

    _service(FakeRunner()).build(config)

    assert not os.path.exists(stale)


def test_classpath_joins_library_archives_with_host_separator(tmp_path):
    config = _project(tmp_path)
    for name in ("b.jar", "a.jar", "notes.txt"):
        with open(os.path.join(config.library_dir, name), "w", encoding="utf-8") as file_obj:
            file_obj.write("x")

    expected = [os.path.join(config.library_dir, "a.jar"), os.path.join(config.library_dir, "b.jar")]

    assert _service(FakeRunner()).build_classpath(config.library_dir) == ":".join(expected)
    assert _service(FakeRunner(), host=WINDOWS).build_classpath(config.library_dir) == ";".join(expected)


def test_classpath_falls_back_to_current_directory(tmp_path):
    config = _project(tmp_path)

    assert _service(FakeRunner()).build_classpath(config.library_dir) == "."


def test_classpath_ignores_non_archive_files(tmp_path):
    config = _project(tmp_path)
    os.makedirs(config.library_dir, exist_ok=True)
    with open(os.path.join(config.library_dir, "README.txt"), "w", encoding="utf-8") as file_obj:
        file_obj.write("x")

    assert _service(FakeRunner()).build_classpath(config.library_dir) == "."


def test_build_invokes_compiler_then_packager(tmp_path):
    runner = FakeRunner()
    config = _project(tmp_path, sources=("A.java", "pkg/B.java"))

    artifact = _service(runner).build(config)

    assert artifact == config.artifact_path
    (compile_cmd, compile_kwargs), (jar_cmd, jar_kwargs) = runner.calls
    assert compile_cmd[:5] == [os.path.join("/jdk/bin", "javac"), "-cp", ".", "-d", config.sources_dir]
    assert sorted(compile_cmd[5:]) == sorted(
        [
            os.path.join(config.sources_dir, "A.java"),
            os.path.join(config.sources_dir, "pkg", "B.java"),
        ]
    )
    assert compile_kwargs["cwd"] == config.sources_dir
    assert compile_kwargs["combine_output"] is True
    assert jar_cmd == [os.path.join("/jdk/bin", "jar"), "cf", config.artifact_path, "."]
    assert jar_kwargs["cwd"] == config.sources_dir


def test_compiler_failure_surfaces_output_and_skips_packaging(tmp_path):
    runner = FakeRunner(returncodes={"javac": 1})
    config = _project(tmp_path)

    with pytest.raises(DeployError, match="Compilation failed:\njavac output") as error:
        _service(runner).build(config)

    assert error.value.kind is ErrorKind.BUILD
    assert len(runner.calls) == 1


def test_packager_failure_is_fatal(tmp_path):
    runner = FakeRunner(returncodes={"jar": 2})

    with pytest.raises(DeployError, match="JAR creation failed"):
        _service(runner).build(_project(tmp_path))


def test_windows_host_uses_exe_suffix(tmp_path):
    runner = FakeRunner(returncodes={"javac.exe": 0})
    config = _project(tmp_path)

    _service(runner, host=WINDOWS).build(config)

    assert runner.calls[0][0][0].endswith("javac.exe")
    assert runner.calls[1][0][0].endswith("jar.exe")
