import dataclasses

import pytest

from sfdeploy.errors import DeployError, ErrorKind
from sfdeploy.host import LINUX
from sfdeploy.models import DeployConfig
from sfdeploy.services.setup import SetupService


class DummyLogger:
    def warning(self, *_args, **_kwargs):
        return None


class DummyConsole:
    def print(self, *_args, **_kwargs):
        return None


class FakeStore:
    def __init__(self, config=None):
        self.config = config
        self.saved = []

    def load(self):
        return self.config

    def save(self, config):
        self.saved.append(config)


class FakeValidator:
    def __init__(self, sources=(), targets=()):
        self.sources = set(sources)
        self.targets = set(targets)

    def is_valid_source_tree(self, path):
        return path in self.sources

    def is_valid_target_tree(self, path):
        return path in self.targets

    def is_valid_extension_name(self, name):
        return bool(name) and not any(char in name for char in ":\\/")


class FakeToolchain:
    def __init__(self, path="/jdk11/bin", error=None):
        self.path = path
        self.error = error
        self.calls = 0

    def locate(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.path


class ScriptedPrompt:
    def __init__(self, texts=(), answers=()):
        self.texts = list(texts)
        self.answers = list(answers)
        self.text_prompts = []

    def ask_text(self, message, default=""):
        self.text_prompts.append(message)
        return self.texts.pop(0)

    def ask_yes_no(self, _message):
        return self.answers.pop(0)


def _service(store, validator, prompt, toolchain=None, host=LINUX):
    return SetupService(
        host=host,
        config_store=store,
        validator=validator,
        toolchain_locator=toolchain or FakeToolchain(),
        prompt_service=prompt,
        logger=DummyLogger(),
        console=DummyConsole(),
        home="/nonexistent-home",
    )


PREVIOUS = DeployConfig(
    source_root="/work/game",
    target_root="/opt/sfs",
    extension_name="MyExtension",
    toolchain_path="/old/jdk/bin",
)


def test_reuses_valid_previous_configuration():
    store = FakeStore(PREVIOUS)
    validator = FakeValidator(sources=["/work/game"], targets=["/opt/sfs"])

    config = _service(store, validator, ScriptedPrompt(answers=[True])).run()

    assert config == dataclasses.replace(PREVIOUS, toolchain_path="/jdk11/bin")
    assert store.saved == []


def test_invalid_previous_configuration_falls_back_to_prompts():
    store = FakeStore(PREVIOUS)
    validator = FakeValidator(sources=["/new/game"], targets=["/new/sfs"])
    prompt = ScriptedPrompt(texts=["/new/game", "/new/sfs", "Ext"], answers=[True])

    config = _service(store, validator, prompt).run()

    assert config.source_root == "/new/game"
    assert config.target_root == "/new/sfs"
    assert store.saved == [config]


def test_declining_previous_configuration_collects_new_one():
    store = FakeStore(PREVIOUS)
    validator = FakeValidator(sources=["/work/game"], targets=["/opt/sfs"])
    prompt = ScriptedPrompt(texts=["/work/game", "/opt/sfs", "Other"], answers=[False])

    config = _service(store, validator, prompt).run()

    assert config.extension_name == "Other"
    assert store.saved == [config]


def test_extension_name_with_separators_is_reprompted():
    validator = FakeValidator(sources=["/work/game"], targets=["/opt/sfs"])
    prompt = ScriptedPrompt(texts=["/work/game", "/opt/sfs", "C:bad", "a/b", "a\\b", "Good"])

    config = _service(FakeStore(), validator, prompt).run()

    assert config.extension_name == "Good"
    assert len(prompt.text_prompts) == 6


def test_invalid_source_directory_is_reprompted():
    validator = FakeValidator(sources=["/work/game"], targets=["/opt/sfs"])
    prompt = ScriptedPrompt(texts=["/missing", "/work/game", "/opt/sfs", "Ext"])

    config = _service(FakeStore(), validator, prompt).run()

    assert config.source_root == "/work/game"


def test_auto_detected_target_is_offered_first():
    host = dataclasses.replace(LINUX, target_candidates=("/nope", "/opt/sfs"))
    validator = FakeValidator(sources=["/work/game"], targets=["/opt/sfs"])
    prompt = ScriptedPrompt(texts=["/work/game", "Ext"], answers=[True])

    config = _service(FakeStore(), validator, prompt, host=host).run()

    assert config.target_root == "/opt/sfs"


def test_missing_toolchain_is_fatal_and_not_persisted():
    store = FakeStore()
    validator = FakeValidator(sources=["/work/game"], targets=["/opt/sfs"])
    prompt = ScriptedPrompt(texts=["/work/game", "/opt/sfs", "Ext"])
    toolchain = FakeToolchain(error=DeployError("Java 11 compiler not found.", ErrorKind.TOOLCHAIN))

    with pytest.raises(DeployError):
        _service(store, validator, prompt, toolchain=toolchain).run()

    assert store.saved == []
