from __future__ import annotations

import json
from pathlib import Path

import pytest

from clinic_import.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS, main
from clinic_import.store import StoreError
from clinic_import.store.local import LocalJsonStore

PATIENT_ROWS = [
    ["Liste des patients", None, None, None],
    [None, None, None, None],
    ["Nom", "Prénom", "Téléphone", "Date de naissance"],
    ["MARTIN", "Sophie", "0612345678", "01/06/1985"],
    ["DUPONT", "Jean", "0699887766", "15/02/1970"],
]


@pytest.fixture()
def patients_file(write_config: Path, make_excel) -> Path:
    return make_excel(write_config.parent.parent, "patients.xlsx", PATIENT_ROWS)


def _stored(workdir: Path, entity: str) -> list[dict]:
    path = workdir / "data" / "store" / f"cmhe_{entity}.json"
    if not path.exists():
        return []
    return json.loads(path.read_text(encoding="utf-8"))


def _never_asked(prompt: str) -> str:
    raise AssertionError(f"unexpected prompt: {prompt}")


def test_preview_only(patients_file, temp_workdir, fresh_logging, capsys):
    code = main(["patients", str(patients_file), "--preview"], ask=_never_asked)
    assert code == EXIT_SUCCESS
    out = capsys.readouterr().out
    assert "MARTIN Sophie" in out
    assert "DUPONT Jean" in out
    assert "SUMMARY" not in out
    assert _stored(temp_workdir, "patients") == []


def test_commit_with_yes(patients_file, temp_workdir, fresh_logging, capsys):
    code = main(["patients", str(patients_file), "--yes"], ask=_never_asked)
    assert code == EXIT_SUCCESS == 0
    out = capsys.readouterr().out
    assert (
        "SUMMARY entity=patients staged=2 imported=2 skipped=0 failed=0 possible_duplicates=0 elapsed_sec="
        in out
    )
    stored = _stored(temp_workdir, "patients")
    assert [(r["lastName"], r["firstName"], r["birthDate"]) for r in stored] == [
        ("MARTIN", "Sophie", "1985-06-01"),
        ("DUPONT", "Jean", "1970-02-15"),
    ]


def test_second_run_skips_duplicates(patients_file, temp_workdir, fresh_logging, capsys):
    assert main(["patients", str(patients_file), "--yes"]) == EXIT_SUCCESS
    assert main(["patients", str(patients_file), "--yes"]) == EXIT_SUCCESS
    out = capsys.readouterr().out
    assert "staged=2 imported=0 skipped=2 failed=0" in out
    assert len(_stored(temp_workdir, "patients")) == 2


@pytest.mark.parametrize("answer, saved", [("oui", 2), ("Y", 2), ("n", 0), ("", 0)])
def test_confirmation(answer, saved, patients_file, temp_workdir, fresh_logging):
    prompts: list[str] = []

    def ask(prompt: str) -> str:
        prompts.append(prompt)
        return answer

    assert main(["patients", str(patients_file)], ask=ask) == EXIT_SUCCESS
    assert prompts == ["Import 2 rows into patients? [y/N] "]
    assert len(_stored(temp_workdir, "patients")) == saved


def test_remove_rows_before_commit(patients_file, temp_workdir, fresh_logging):
    assert main(["patients", str(patients_file), "--remove", "0", "--yes"]) == EXIT_SUCCESS
    assert [r["lastName"] for r in _stored(temp_workdir, "patients")] == ["DUPONT"]


def test_remove_out_of_range(patients_file, temp_workdir, fresh_logging, capsys):
    assert main(["patients", str(patients_file), "--remove", "0,7", "--yes"]) == EXIT_FATAL
    assert "ERROR remove:" in capsys.readouterr().out
    assert _stored(temp_workdir, "patients") == []


def test_partial_failure_exit_code(patients_file, temp_workdir, fresh_logging, monkeypatch, capsys):
    original = LocalJsonStore.save

    def flaky(self, entity, record):
        if record["lastName"] == "DUPONT":
            raise StoreError("disk quota exceeded")
        original(self, entity, record)

    monkeypatch.setattr(LocalJsonStore, "save", flaky)
    assert main(["patients", str(patients_file), "--yes"]) == EXIT_PARTIAL_FAILURE == 2
    assert "imported=1 skipped=0 failed=1" in capsys.readouterr().out
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    assert json.loads(logs[0].read_text(encoding="utf-8"))["row"] == 5


def test_missing_config(temp_workdir, fresh_logging, capsys, make_excel):
    p = make_excel(temp_workdir, "patients.xlsx", PATIENT_ROWS)
    assert main(["patients", str(p), "--yes"]) == EXIT_FATAL == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_env_file_overrides_backend(patients_file, temp_workdir, fresh_logging, monkeypatch, capsys):
    monkeypatch.setenv("CLINIC_STORE_BACKEND", "local")
    (temp_workdir / ".env").write_text("CLINIC_STORE_BACKEND=mongo\n", encoding="utf-8")
    assert main(["patients", str(patients_file), "--yes"]) == EXIT_FATAL
    assert "CLINIC_STORE_BACKEND" in capsys.readouterr().out


def test_unreadable_file(write_config, temp_workdir, fresh_logging, capsys):
    bad = temp_workdir / "patients.xlsx"
    bad.write_bytes(b"not a workbook")
    assert main(["patients", str(bad), "--yes"]) == EXIT_FATAL
    assert "ERROR file:" in capsys.readouterr().out


def test_header_only_sheet(write_config, temp_workdir, fresh_logging, make_excel, capsys):
    p = make_excel(temp_workdir, "vide.xlsx", [["Nom", "Prénom"]])
    assert main(["patients", str(p), "--yes"]) == EXIT_FATAL
    assert "no readable data" in capsys.readouterr().out


def test_all_rows_excluded(write_config, temp_workdir, fresh_logging, make_excel, capsys):
    p = make_excel(temp_workdir, "depenses.xlsx", [["Date", "Libellé", "Montant"], ["01/03/2024", "Offert", 0]])
    assert main(["expenses", str(p)], ask=_never_asked) == EXIT_SUCCESS
    assert "WARN nothing to import" in capsys.readouterr().out


def test_default_date_for_ledger(write_config, temp_workdir, fresh_logging, make_excel):
    p = make_excel(
        temp_workdir, "depenses.xlsx", [["Date", "Libellé", "Montant"], ["hier", "Loyer", 3000]]
    )
    assert main(["expenses", str(p), "--default-date", "2024-04-30", "--yes"]) == EXIT_SUCCESS
    (record,) = _stored(temp_workdir, "expenses")
    assert record["date"] == "2024-04-30"
    assert record["category"] == "OTHER"
    assert record["description"] == "Loyer"
    assert record["id"].startswith("EXP-IMP-")


def test_bad_default_date(write_config, make_excel, temp_workdir, fresh_logging):
    p = make_excel(temp_workdir, "depenses.xlsx", [["Date", "Montant"], ["01/03/2024", 10]])
    with pytest.raises(SystemExit) as e:
        main(["expenses", str(p), "--default-date", "30/04/2024"])
    assert e.value.code == 2
