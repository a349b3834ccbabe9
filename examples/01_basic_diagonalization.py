"""
Basic Diagonalization Example
=============================

This example demonstrates how to:
1. Describe a spinful square lattice as a set of hopping amplitudes.
2. Diagonalize it exactly.
3. Extract the density of states.

To run:
    python examples/01_basic_diagonalization.py
"""

import numpy as np
from TBS import Diagonalizer, DiagonalizerExtractor, ExtractorConfig, Model

SIZE_X  = 10
SIZE_Y  = 10
MU      = -1.0
T       = 1.0

def build_model() -> Model:
    # H = -mu sum_i c_i^dagger c_i - t sum_<ij> c_i^dagger c_j, indices are {x, y, spin}
    model = Model(name="square")
    for x in range(SIZE_X):
        for y in range(SIZE_Y):
            for s in range(2):
                model.add(-MU, [x, y, s], [x, y, s])
                if x + 1 < SIZE_X:
                    model.add_and_hermitian_conjugate(-T, [x + 1, y, s], [x, y, s])
                if y + 1 < SIZE_Y:
                    model.add_and_hermitian_conjugate(-T, [x, y + 1, s], [x, y, s])
    model.construct()
    return model

def main():
    # 1. Model
    model = build_model()
    print(f"Basis size: {model.get_basis_size()}")

    # 2. Solver
    solver = Diagonalizer()
    solver.set_model(model)
    solver.run()
    print(f"Lowest eigenvalue : {solver.get_eigen_value(0):.6f}")
    print(f"Highest eigenvalue: {solver.get_eigen_value(model.get_basis_size() - 1):.6f}")

    # 3. Density of states, broadened with a Gaussian
    extractor   = DiagonalizerExtractor(solver, ExtractorConfig(lower_bound=-10, upper_bound=10, resolution=1000,
                                                                broadening="gaussian", broadening_width=0.1))
    dos         = extractor.calculate_dos()
    print(f"Integrated DOS    : {np.sum(dos.data) * dos.dE:.3f}")

    peak = int(np.argmax(dos.data))
    print(f"DOS maximum at E = {dos.energies[peak]:.3f}")

if __name__ == "__main__":
    main()
