from ratescal.trades.rates.deposit import ResolvedTermDeposit
from ratescal.trades.rates.fra import ResolvedFra
from ratescal.trades.rates.swap import ResolvedFixedFloatSwap, AccrualPeriod
