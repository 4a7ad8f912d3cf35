import textwrap

import pytest

from awsmfa.store import ConfigStore, new_parser


def make_store(sections):
    parser = new_parser()
    parser.read_dict(sections)
    return ConfigStore(parser)


@pytest.fixture
def write_ini(tmp_path):
    def _write(name, content):
        path = tmp_path / name
        path.write_text(textwrap.dedent(content).lstrip())
        return path
    return _write


@pytest.fixture(autouse=True)
def clean_aws_env(monkeypatch):
    for var in ('AWS_PROFILE', 'AWS_REGION', 'AWS_DEFAULT_REGION'):
        monkeypatch.delenv(var, raising=False)
