import pytest

from etshell.tunnels import TunnelSpecError, parse_ranges_to_pairs


def test_single_pairs():
    assert parse_ranges_to_pairs("10080:80,10443:443") == [(10080, 80), (10443, 443)]


def test_range_pairs():
    pairs = parse_ranges_to_pairs("10090-10092:8000-8002")
    assert pairs == [(10090, 8000), (10091, 8001), (10092, 8002)]


def test_range_preserves_offsets():
    pairs = parse_ranges_to_pairs("2000-2009:3000-3009")
    assert len(pairs) == 10
    assert all(dst - src == 1000 for src, dst in pairs)
    assert [src for src, _ in pairs] == list(range(2000, 2010))


def test_mixed_entries_keep_order():
    pairs = parse_ranges_to_pairs("5000:6000,7000-7001:8000-8001")
    assert pairs == [(5000, 6000), (7000, 8000), (7001, 8001)]


def test_single_port_range():
    assert parse_ranges_to_pairs("4000-4000:5000-5000") == [(4000, 5000)]


def test_trailing_text_after_number_is_ignored():
    assert parse_ranges_to_pairs("22x:2222") == [(22, 2222)]


def test_range_length_mismatch():
    with pytest.raises(TunnelSpecError):
        parse_ranges_to_pairs("10090-10092:8000-8005")


@pytest.mark.parametrize("spec", ["10090-10092:8000", "10090:8000-8002"])
def test_one_sided_range(spec):
    with pytest.raises(TunnelSpecError):
        parse_ranges_to_pairs(spec)


@pytest.mark.parametrize("spec", ["abc:80", "80:xyz", "", "8080"])
def test_invalid_entries(spec):
    with pytest.raises(TunnelSpecError):
        parse_ranges_to_pairs(spec)


def test_number_out_of_int_range():
    with pytest.raises(TunnelSpecError):
        parse_ranges_to_pairs("99999999999:80")