# /aave_liquidator/abis/liquidator.py
# Flash-loan liquidator helper contract. liquidate() returns the realised gain
# in debt-asset units, so an eth_call doubles as a profit simulation.
LIQUIDATOR_ABI = [
    {"inputs": [{"internalType": "address", "name": "collateral", "type": "address"}, {"internalType": "address", "name": "debt", "type": "address"}, {"internalType": "uint24", "name": "poolFee", "type": "uint24"}, {"internalType": "uint256", "name": "debtToCover", "type": "uint256"}, {"internalType": "bytes32", "name": "data0", "type": "bytes32"}, {"internalType": "bytes32", "name": "data1", "type": "bytes32"}], "name": "liquidate", "outputs": [{"internalType": "int256", "name": "", "type": "int256"}], "stateMutability": "nonpayable", "type": "function"},
    {"inputs": [{"internalType": "address", "name": "token", "type": "address"}], "name": "approvePool", "outputs": [], "stateMutability": "nonpayable", "type": "function"},
]
