import datetime

from fpsbios.romver import make_romver, main, write_romver


def test_make_romver_format():
    assert make_romver(0, 1, datetime.date(2024, 1, 2)) == b"0001PD20240102\n\0"


def test_make_romver_wide_numbers():
    assert make_romver(123, 7, datetime.date(2024, 1, 2)).startswith(b"12307PD")


def test_make_romver_default_date():
    stamp = datetime.date.today().strftime("%Y%m%d").encode()
    assert make_romver(1, 2).endswith(stamp + b"\n\0")


def test_write_romver(tmp_path):
    date = datetime.date(2023, 12, 31)
    path = tmp_path / "ROMVER"
    write_romver(path, 2, 3, date)
    assert path.read_bytes() == make_romver(2, 3, date)


def test_main_writes_romver(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["0", "1"]) == 0
    data = (tmp_path / "ROMVER").read_bytes()
    assert data == make_romver(0, 1, datetime.date.today())
    assert len(data) == 16


def test_main_parses_octal_and_hex(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["010", "0x8"]) == 0
    assert (tmp_path / "ROMVER").read_bytes() == make_romver(8, 8, datetime.date.today())


def test_main_garbage_is_zero(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["abc", "1"]) == 0
    assert (tmp_path / "ROMVER").read_bytes() == make_romver(0, 1, datetime.date.today())


def test_main_usage(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["1"]) == 1
    assert not (tmp_path / "ROMVER").exists()