import dataclasses
import os
import subprocess

import pytest

from sfdeploy.errors import DeployError, ErrorKind
from sfdeploy.host import LINUX
from sfdeploy.services.toolchain import ToolchainLocator


class DummyLogger:
    def debug(self, *_args, **_kwargs):
        return None

    def info(self, *_args, **_kwargs):
        return None

    def warning(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


class FakeRunner:
    def __init__(self, outputs):
        self.outputs = outputs
        self.calls = []

    def run(self, cmd, **kwargs):
        self.calls.append(cmd)
        output = self.outputs.get(cmd[0])
        if output is None:
            raise DeployError(f"Required command not found: {cmd[0]}", ErrorKind.COMMAND)
        return subprocess.CompletedProcess(cmd, 0, stdout=output, stderr=None)


class FakePrompt:
    def __init__(self, answer=""):
        self.answer = answer
        self.asked = 0

    def ask_text(self, *_args, **_kwargs):
        self.asked += 1
        return self.answer


def _compiler(root, name="javac"):
    bin_dir = root / "bin"
    bin_dir.mkdir(parents=True, exist_ok=True)
    compiler = bin_dir / name
    compiler.write_text("", encoding="utf-8")
    return compiler


def _locator(
    runner,
    prompt=None,
    environ=None,
    which=lambda _name: None,
    glob_func=lambda _p: [],
    host=LINUX,
):
    return ToolchainLocator(
        host=host,
        command_runner=runner,
        prompt_service=prompt or FakePrompt(),
        logger=DummyLogger(),
        console=DummyConsole(),
        environ=environ or {},
        which=which,
        glob_func=glob_func,
    )


def test_java_home_wins_when_version_matches(tmp_path):
    compiler = _compiler(tmp_path / "jdk11")
    runner = FakeRunner({str(compiler): "javac 11.0.21\n"})

    locator = _locator(runner, environ={"JAVA_HOME": str(tmp_path / "jdk11")})

    assert locator.locate() == str(compiler.parent)


def test_search_path_skipped_when_version_differs(tmp_path):
    wrong = _compiler(tmp_path / "jdk17")
    runner = FakeRunner({str(wrong): "javac 17.0.2\n"})
    prompt = FakePrompt(answer="")

    locator = _locator(runner, prompt=prompt, which=lambda _name: str(wrong))

    with pytest.raises(DeployError) as error:
        locator.locate()

    assert error.value.kind is ErrorKind.TOOLCHAIN
    assert prompt.asked == 1


def test_well_known_pattern_used_when_env_and_path_fail(tmp_path):
    compiler = _compiler(tmp_path / "jdk-11.0.2")
    runner = FakeRunner({str(compiler): "Picked up _JAVA_OPTIONS\njavac 11.0.2\n"})
    matches = {"pattern-b": [str(compiler)]}

    host = dataclasses.replace(LINUX, toolchain_patterns=("pattern-a", "pattern-b"))

    locator = _locator(runner, glob_func=lambda pattern: matches.get(pattern, []), host=host)

    assert locator.locate() == os.path.dirname(str(compiler))
    assert runner.calls == [[str(compiler), "-version"]]


def test_prompt_fallback_accepts_directory_with_compiler(tmp_path):
    compiler = _compiler(tmp_path / "manual")
    prompt = FakePrompt(answer=str(compiler.parent))

    locator = _locator(FakeRunner({}), prompt=prompt)

    assert locator.locate() == str(compiler.parent)


def test_prompt_fallback_rejects_directory_without_compiler(tmp_path):
    locator = _locator(FakeRunner({}), prompt=FakePrompt(answer=str(tmp_path)))

    with pytest.raises(DeployError, match="Java 11 compiler not found"):
        locator.locate()


@pytest.mark.parametrize(
    "output, expected",
    [
        ("javac 11.0.21", 11),
        ("javac 1.8.0_292", 8),
        ("javac 17-ea", 17),
        ("javac 21", 21),
        ("command not found", None),
    ],
)
def test_parse_major_version(output, expected):
    assert ToolchainLocator.parse_major_version(output) == expected
