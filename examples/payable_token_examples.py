"""
Payable Token Example

Demonstrates how to deploy a qRC-1363 token and pay a contract with it.
"""

from qrc1363.config import load_config
from qrc1363.contracts import ContractState, QRC1363Holder, QRC1363Payable
from qrc1363.tokens import CallbackRejectedError, QRC1363Token


DEPLOYER = '0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb0'
CUSTOMER = '0x5FbDB2315678afecb367f032d93F642f64180aa3'


class CoffeeShop(QRC1363Payable):
    """Accepts payment in one token and counts the cups it owes."""

    PRICE = 3

    def __init__(self, accepted_token):
        super().__init__(accepted_token)
        self.cups_owed = {}

    def _transfer_received(self, operator, sender, amount, data):
        if amount < self.PRICE:
            raise ValueError("a coffee costs 3")
        self.cups_owed[sender] = self.cups_owed.get(sender, 0) + amount // self.PRICE


def example_deploy():
    """Example: Deploy a token from config.toml (or defaults)."""

    config = load_config()
    config.token.initial_supply = 1_000
    state = ContractState.from_config(config)
    token = QRC1363Token.from_config(config, state, DEPLOYER)

    print(f"Token deployed at: {token.address}")
    print(f"Interfaces: {token.to_dict()['interfaces']}")

    token.transfer(DEPLOYER, CUSTOMER, 100)
    return state, token


def example_pay_contract(state, token):
    """Example: Pay a contract with transferAndCall."""

    shop = CoffeeShop(token.address)
    state.deploy(shop, DEPLOYER)

    token.transfer_and_call(CUSTOMER, shop.address, 9, b"table 4")
    print(f"Shop balance: {token.balance_of(shop.address)}")
    print(f"Cups owed to customer: {shop.cups_owed}")

    try:
        token.transfer_and_call(CUSTOMER, shop.address, 1)
    except CallbackRejectedError as e:
        print(f"Underpayment refused: {e}")
    print(f"Customer balance unchanged: {token.balance_of(CUSTOMER)}")


def example_approve_holder(state, token):
    """Example: Approve a contract that accepts everything."""

    vault = QRC1363Holder()
    state.deploy(vault, DEPLOYER)

    token.approve_and_call(CUSTOMER, vault.address, 50)
    print(f"Vault allowance: {token.allowance(CUSTOMER, vault.address)}")


def main():
    """Run all examples."""

    print("=" * 70)
    print("qRC-1363 Payable Token Examples")
    print("=" * 70)
    print()

    print("1. Deploying token...")
    state, token = example_deploy()
    print()

    print("2. Paying a contract...")
    example_pay_contract(state, token)
    print()

    print("3. Approving a holder contract...")
    example_approve_holder(state, token)
    print()

    print("=" * 70)
    print("Examples complete!")
    print("=" * 70)


if __name__ == '__main__':
    main()
