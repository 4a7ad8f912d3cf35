import pytest

from awsmfa.output import format_duration, render_table, sec_to_hms


@pytest.mark.parametrize('seconds,want', [
    (40000, (11, 6, 40)),
    (3600, (1, 0, 0)),
    (0, (0, 0, 0)),
    (59, (0, 0, 59)),
    (129600, (36, 0, 0)),
])
def test_sec_to_hms(seconds, want):
    assert sec_to_hms(seconds) == want


def test_format_duration():
    assert format_duration(43200) == '43200 sec (12h 0m 0s)'


def test_render_table():
    table = render_table(['Parameter', 'Value'], [('Region', 'us-east-1'), ('API Type', 'AWS STS GetSessionToken')])
    assert table.splitlines() == [
        '+-----------+-------------------------+',
        '| PARAMETER | VALUE                   |',
        '+-----------+-------------------------+',
        '| Region    | us-east-1               |',
        '| API Type  | AWS STS GetSessionToken |',
        '+-----------+-------------------------+',
    ]
