"""
Density, Magnetization and LDOS
===============================

This example demonstrates how to:
1. Build a chain with a Zeeman field.
2. Extract site-resolved densities with IDX.ALL and IDX.SUM_ALL, also on a grid.
3. Extract the spin matrix and the local density of states.
4. Evaluate a retarded Green's function.

To run:
    python examples/02_density_and_ldos.py
"""

import numpy as np
from TBS import IDX, Diagonalizer, DiagonalizerExtractor, ExtractorConfig, Model

SIZE    = 20
T       = 1.0
H_Z     = 0.3

def build_chain() -> Model:
    model = Model(temperature=0.05, chemical_potential=0.0, name="zeeman-chain")
    for x in range(SIZE):
        model.add(-H_Z, [x, 0], [x, 0])
        model.add(H_Z, [x, 1], [x, 1])
        if x + 1 < SIZE:
            for s in range(2):
                model.add_and_hermitian_conjugate(-T, [x + 1, s], [x, s])
    model.construct()
    return model

def main():
    solver = Diagonalizer()
    solver.set_model(build_chain())
    solver.run()

    extractor = DiagonalizerExtractor(solver, ExtractorConfig(lower_bound=-3, upper_bound=3, resolution=600,
                                                              broadening="lorentzian", broadening_width=0.05))

    # 1. Densities: per site (spins summed) and per site and spin
    per_site = extractor.calculate_density([[IDX.ALL, IDX.SUM_ALL]])
    per_spin = extractor.calculate_density([[IDX.ALL, IDX.ALL]])
    print("Density per site:", np.round(per_site.to_array(), 3))
    print(f"Spin-up on site 0: {per_spin([0, 0]):.3f}, spin-down: {per_spin([0, 1]):.3f}")

    # the same grid in the ranges format: one row per site, one column per spin
    grid = extractor.calculate_density([IDX.ALL, IDX.ALL], ranges=[SIZE, 2]).to_grid()
    print("Spin polarization per site:", np.round(grid[:, 0] - grid[:, 1], 3))

    # 2. Spin matrix in the middle of the chain
    mag = extractor.calculate_magnetization([[SIZE // 2, IDX.SPIN]])
    m   = mag([SIZE // 2, IDX.SPIN])
    print(f"m_z on site {SIZE // 2}: {(m[0, 0] - m[1, 1]).real:.4f}")

    # 3. LDOS at the edge and in the bulk
    ldos = extractor.calculate_ldos([[0, IDX.SUM_ALL], [SIZE // 2, IDX.SUM_ALL]])
    for key, spectrum in ldos.items():
        print(f"LDOS{key}: maximum {spectrum.max():.3f} at E = {ldos.energies[np.argmax(spectrum)]:.3f}")

    # 4. Retarded Green's function between the chain ends
    G = extractor.calculate_greens_function([[0, 0], [SIZE - 1, 0]])
    print(f"max |G(0, {SIZE - 1})| = {np.abs(G([0, 0], [SIZE - 1, 0])).max():.3f}")

if __name__ == "__main__":
    main()
