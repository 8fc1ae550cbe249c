FASTMATH = False  # Global flag for Numba's fastmath option

# Corrector iteration
NLS_MAXCOR = 3  # maximum number of corrector iterations per attempt
CRDOWN = 0.3  # decay factor in the convergence rate estimate
RDIV = 2.0  # declare divergence if del/delp > RDIV

# Linear setup scheduling (step attempt driver)
MSBP = 20  # max steps between linear setups
DGMAX = 0.3  # |gamma/gammap - 1| above which a setup is forced

# Dense linear solver Jacobian reuse
MSBJ = 51  # max steps between Jacobian evaluations
DGMAX_JBAD = 0.2  # |gamma/gammap - 1| below which a bad-J signal recomputes J
