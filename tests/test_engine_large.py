import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from payments_engine import PaymentsEngine


class TestPaymentsEngineLargeScale:
    def test_1000_accounts_6000_transactions(self, tmp_path):
        """Test with 1000 accounts and 6000 transactions."""
        num_clients = 1000
        rows = ["type, client, tx, amount"]
        tx_id = 1

        # Each client gets: 3 deposits (100, 200, 300) and 2 withdrawals (50, 100)
        # Expected per client: 100 + 200 + 300 - 50 - 100 = 450, plus 50 more below = 500

        for client_id in range(1, num_clients + 1):
            rows.append(f"deposit, {client_id}, {tx_id}, 100")
            tx_id += 1
            rows.append(f"deposit, {client_id}, {tx_id}, 200")
            tx_id += 1
            rows.append(f"deposit, {client_id}, {tx_id}, 300")
            tx_id += 1
            rows.append(f"withdrawal, {client_id}, {tx_id}, 50")
            tx_id += 1
            rows.append(f"withdrawal, {client_id}, {tx_id}, 100")
            tx_id += 1

        # Extra deposit for each client
        for client_id in range(1, num_clients + 1):
            rows.append(f"deposit, {client_id}, {tx_id}, 50")
            tx_id += 1

        expected_balance = Decimal("500")  # 450 + 50

        csv_file = tmp_path / "large_test.csv"
        csv_file.write_text('\n'.join(rows))

        engine = PaymentsEngine()
        accounts = engine.process_file(str(csv_file))

        assert len(accounts) == num_clients
        assert engine.stats.processed == 6000
        assert engine.stats.failed == 0

        for client_id in range(1, num_clients + 1):
            assert accounts[client_id].available == expected_balance, \
                f"Client {client_id}: expected {expected_balance}, got {accounts[client_id].available}"

    def test_disputes_across_many_clients(self, tmp_path):
        """Every client disputes its first deposit; odd clients get charged back, even ones resolved."""
        num_clients = 500
        rows = ["type, client, tx, amount"]

        for client_id in range(1, num_clients + 1):
            rows.append(f"deposit, {client_id}, {client_id * 10}, 100")
            rows.append(f"deposit, {client_id}, {client_id * 10 + 1}, 25.5")
        for client_id in range(1, num_clients + 1):
            rows.append(f"dispute, {client_id}, {client_id * 10},")
        for client_id in range(1, num_clients + 1):
            settle = "chargeback" if client_id % 2 else "resolve"
            rows.append(f"{settle}, {client_id}, {client_id * 10},")

        csv_file = tmp_path / "disputes.csv"
        csv_file.write_text('\n'.join(rows))

        accounts = PaymentsEngine().process_file(str(csv_file))

        for client_id in range(1, num_clients + 1):
            account = accounts[client_id]
            assert account.held == Decimal("0")
            if client_id % 2:
                assert account.available == Decimal("25.5")
                assert account.locked is True
            else:
                assert account.available == Decimal("125.5")
                assert account.locked is False

    def test_bounded_retention_keeps_memory_flat(self, tmp_path):
        rows = ["type, client, tx, amount"]
        rows.extend(f"deposit, 1, {tx_id}, 1" for tx_id in range(1, 5001))

        csv_file = tmp_path / "retention.csv"
        csv_file.write_text('\n'.join(rows))

        engine = PaymentsEngine(max_transactions=100)
        accounts = engine.process_file(str(csv_file))

        assert accounts[1].available == Decimal("5000")
        assert engine.store.transaction_count == 100
