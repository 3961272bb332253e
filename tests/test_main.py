import io
import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import main
from models import ClientAccount


class TestWriteAccounts:
    def test_format(self):
        out = io.StringIO()
        main.write_accounts(out, [
            ClientAccount(client_id=1, total=Decimal("1.5"), held=Decimal("0")),
            ClientAccount(client_id=2, total=Decimal("3.0000"), held=Decimal("0.0000"), locked=True),
        ])

        assert out.getvalue() == (
            "client,available,held,total,locked\n"
            "1,1.5000,0.0000,1.5000,false\n"
            "2,3.0000,0.0000,3.0000,true\n"
        )


class TestMain:
    def test_usage(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["payments-ledger"])

        with pytest.raises(SystemExit) as excinfo:
            main.main()

        assert excinfo.value.code == 1
        assert "Usage" in capsys.readouterr().err

    def test_prints_sorted_client_table(self, tmp_path, monkeypatch, capsys):
        csv_file = tmp_path / "test.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 50, 51, 50.5555",
            "deposit, 2, 5, 5.0",
            "deposit, 1, 1, 1.0",
            "dispute, 2, 5,",
            "chargeback, 2, 5,",
            "deposit, 2, 7, 1.0",
            "deposit, 3, 3, 3.0",
            "dispute, 3, 3,",
        ]))
        monkeypatch.setattr(sys, "argv", ["payments-ledger", str(csv_file)])

        main.main()

        captured = capsys.readouterr()
        assert captured.out == (
            "client,available,held,total,locked\n"
            "1,1.0000,0.0000,1.0000,false\n"
            "2,1.0000,0.0000,1.0000,true\n"
            "3,0.0000,3.0000,3.0000,false\n"
            "50,50.5555,0.0000,50.5555,false\n"
        )
        assert "Processed: 8, Rejected: 0, Malformed: 0" in captured.err
