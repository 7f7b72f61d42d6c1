import pytest

from aave_liquidator.core.nonce_manager import NonceManager
from aave_liquidator.core.state import GasBidInfo
from aave_liquidator.core.tx import TransactionManager, bid_gas_price


class DummyEth:
    def __init__(self):
        self.sent = []
        self.fail_next_send = False

    async def estimate_gas(self, _):
        return 21000

    async def send_raw_transaction(self, raw):
        if self.fail_next_send:
            self.fail_next_send = False
            raise ConnectionError("nonce too low")
        self.sent.append(raw)
        return bytes([len(self.sent)]) * 32

    @property
    async def gas_price(self):
        return 10

    @property
    async def max_priority_fee(self):
        return 1

    async def get_transaction_count(self, address, block_identifier):
        return 5


class DummyW3:
    def __init__(self):
        self.eth = DummyEth()


class DummyAccount:
    address = "0x000000000000000000000000000000000000E0E0"

    def __init__(self):
        self.signed = []

    def sign_transaction(self, tx):
        self.signed.append(dict(tx))
        return type('S', (), {'raw_transaction': b'raw%d' % tx['nonce']})()


def make_manager():
    w3 = DummyW3()
    return TransactionManager(w3, DummyAccount(), chain_id=10), w3


def test_bid_gas_price():
    assert bid_gas_price(GasBidInfo(bid_percentage=50, total_profit=2_000_000), 1000) == 1000
    assert bid_gas_price(GasBidInfo(bid_percentage=0, total_profit=2_000_000), 1000) == 0
    with pytest.raises(ValueError):
        bid_gas_price(GasBidInfo(bid_percentage=50, total_profit=1), 0)


def test_bid_on_a_realistic_profit_is_in_gwei_range():
    # 0.025 ETH profit, half of it spent on 500k gas
    bid = GasBidInfo(bid_percentage=50, total_profit=25 * 10**15)
    assert bid_gas_price(bid, 500_000) == 25 * 10**9


@pytest.mark.asyncio
async def test_submit_fills_fields_and_bumps_nonce():
    tm, w3 = make_manager()
    bid = GasBidInfo(bid_percentage=50, total_profit=42_000_000)

    first = await tm.submit({'to': '0x1', 'data': b'', 'value': 0}, bid)
    await tm.submit({'to': '0x1', 'data': b'', 'value': 0})

    signed = tm.account.signed
    assert [tx['nonce'] for tx in signed] == [5, 6]
    assert signed[0]['chainId'] == 10
    assert signed[0]['from'] == DummyAccount.address
    assert signed[0]['gas'] == 21000
    assert signed[0]['maxFeePerGas'] == 42_000_000 * 50 // 100 // 21000
    assert signed[1]['maxFeePerGas'] == 20
    assert signed[1]['maxPriorityFeePerGas'] == 1
    assert first == (bytes([1]) * 32).hex()
    assert w3.eth.sent == [b'raw5', b'raw6']


@pytest.mark.asyncio
async def test_failed_broadcast_does_not_consume_the_nonce():
    tm, w3 = make_manager()
    w3.eth.fail_next_send = True

    with pytest.raises(ConnectionError):
        await tm.submit({'to': '0x1'})
    await tm.submit({'to': '0x1'})

    assert [tx['nonce'] for tx in tm.account.signed] == [5, 5]
    assert await tm.nonce_manager.get() == 6


@pytest.mark.asyncio
async def test_nonce_manager_resyncs_from_chain():
    nm = NonceManager(DummyW3(), DummyAccount.address)
    assert await nm.get() == 5
    nm.bump()
    nm.bump()
    assert await nm.get() == 7
    assert await nm.sync() == 5
