# /aave_liquidator/abis/aave.py
# Minimal Aave v3 ABIs: only the members the liquidator touches.

POOL_ABI = [
    {"anonymous": False, "inputs": [{"indexed": True, "internalType": "address", "name": "reserve", "type": "address"}, {"indexed": False, "internalType": "address", "name": "user", "type": "address"}, {"indexed": True, "internalType": "address", "name": "onBehalfOf", "type": "address"}, {"indexed": False, "internalType": "uint256", "name": "amount", "type": "uint256"}, {"indexed": False, "internalType": "enum DataTypes.InterestRateMode", "name": "interestRateMode", "type": "uint8"}, {"indexed": False, "internalType": "uint256", "name": "borrowRate", "type": "uint256"}, {"indexed": True, "internalType": "uint16", "name": "referralCode", "type": "uint16"}], "name": "Borrow", "type": "event"},
    {"anonymous": False, "inputs": [{"indexed": True, "internalType": "address", "name": "reserve", "type": "address"}, {"indexed": False, "internalType": "address", "name": "user", "type": "address"}, {"indexed": True, "internalType": "address", "name": "onBehalfOf", "type": "address"}, {"indexed": False, "internalType": "uint256", "name": "amount", "type": "uint256"}, {"indexed": True, "internalType": "uint16", "name": "referralCode", "type": "uint16"}], "name": "Supply", "type": "event"},
    {"inputs": [{"internalType": "address", "name": "user", "type": "address"}], "name": "getUserAccountData", "outputs": [{"internalType": "uint256", "name": "totalCollateralBase", "type": "uint256"}, {"internalType": "uint256", "name": "totalDebtBase", "type": "uint256"}, {"internalType": "uint256", "name": "availableBorrowsBase", "type": "uint256"}, {"internalType": "uint256", "name": "currentLiquidationThreshold", "type": "uint256"}, {"internalType": "uint256", "name": "ltv", "type": "uint256"}, {"internalType": "uint256", "name": "healthFactor", "type": "uint256"}], "stateMutability": "view", "type": "function"},
    {"inputs": [{"internalType": "address", "name": "collateralAsset", "type": "address"}, {"internalType": "address", "name": "debtAsset", "type": "address"}, {"internalType": "address", "name": "user", "type": "address"}, {"internalType": "uint256", "name": "debtToCover", "type": "uint256"}, {"internalType": "bool", "name": "receiveAToken", "type": "bool"}], "name": "liquidationCall", "outputs": [], "stateMutability": "nonpayable", "type": "function"},
]

# getUserAccountData output layout, for decoding Multicall3 return data
USER_ACCOUNT_DATA_TYPES = ["uint256", "uint256", "uint256", "uint256", "uint256", "uint256"]

POOL_DATA_PROVIDER_ABI = [
    {"inputs": [], "name": "getAllReservesTokens", "outputs": [{"components": [{"internalType": "string", "name": "symbol", "type": "string"}, {"internalType": "address", "name": "tokenAddress", "type": "address"}], "internalType": "struct IPoolDataProvider.TokenData[]", "name": "", "type": "tuple[]"}], "stateMutability": "view", "type": "function"},
    {"inputs": [], "name": "getAllATokens", "outputs": [{"components": [{"internalType": "string", "name": "symbol", "type": "string"}, {"internalType": "address", "name": "tokenAddress", "type": "address"}], "internalType": "struct IPoolDataProvider.TokenData[]", "name": "", "type": "tuple[]"}], "stateMutability": "view", "type": "function"},
    {"inputs": [{"internalType": "address", "name": "asset", "type": "address"}], "name": "getReserveConfigurationData", "outputs": [{"internalType": "uint256", "name": "decimals", "type": "uint256"}, {"internalType": "uint256", "name": "ltv", "type": "uint256"}, {"internalType": "uint256", "name": "liquidationThreshold", "type": "uint256"}, {"internalType": "uint256", "name": "liquidationBonus", "type": "uint256"}, {"internalType": "uint256", "name": "reserveFactor", "type": "uint256"}, {"internalType": "bool", "name": "usageAsCollateralEnabled", "type": "bool"}, {"internalType": "bool", "name": "borrowingEnabled", "type": "bool"}, {"internalType": "bool", "name": "stableBorrowRateEnabled", "type": "bool"}, {"internalType": "bool", "name": "isActive", "type": "bool"}, {"internalType": "bool", "name": "isFrozen", "type": "bool"}], "stateMutability": "view", "type": "function"},
    {"inputs": [{"internalType": "address", "name": "asset", "type": "address"}], "name": "getLiquidationProtocolFee", "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}], "stateMutability": "view", "type": "function"},
    {"inputs": [{"internalType": "address", "name": "asset", "type": "address"}, {"internalType": "address", "name": "user", "type": "address"}], "name": "getUserReserveData", "outputs": [{"internalType": "uint256", "name": "currentATokenBalance", "type": "uint256"}, {"internalType": "uint256", "name": "currentStableDebt", "type": "uint256"}, {"internalType": "uint256", "name": "currentVariableDebt", "type": "uint256"}, {"internalType": "uint256", "name": "principalStableDebt", "type": "uint256"}, {"internalType": "uint256", "name": "scaledVariableDebt", "type": "uint256"}, {"internalType": "uint256", "name": "stableBorrowRate", "type": "uint256"}, {"internalType": "uint256", "name": "liquidityRate", "type": "uint256"}, {"internalType": "uint40", "name": "stableRateLastUpdated", "type": "uint40"}, {"internalType": "bool", "name": "usageAsCollateralEnabled", "type": "bool"}], "stateMutability": "view", "type": "function"},
]

AAVE_ORACLE_ABI = [
    {"inputs": [{"internalType": "address", "name": "asset", "type": "address"}], "name": "getAssetPrice", "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}], "stateMutability": "view", "type": "function"},
]

L2_ENCODER_ABI = [
    {"inputs": [{"internalType": "address", "name": "collateralAsset", "type": "address"}, {"internalType": "address", "name": "debtAsset", "type": "address"}, {"internalType": "address", "name": "user", "type": "address"}, {"internalType": "uint256", "name": "debtToCover", "type": "uint256"}, {"internalType": "bool", "name": "receiveAToken", "type": "bool"}], "name": "encodeLiquidationCall", "outputs": [{"internalType": "bytes32", "name": "", "type": "bytes32"}, {"internalType": "bytes32", "name": "", "type": "bytes32"}], "stateMutability": "view", "type": "function"},
]
