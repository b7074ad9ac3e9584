# File: demos/run_cantilever.py
"""
DEMO: 3D CANTILEVER WITH A TIP LOAD
===================================

PURPOSE:
--------
The smallest useful frame model: one beam, fixed at one end, a
transverse force at the other. The tip deflection has a closed form,

    δ = F·L³ / (3·E·I)

so this demo doubles as a sanity check of the beam element. It also
shows the pandas tables a Result produces and draws the deformed shape.

UNITS: N, mm (E in N/mm²)
"""

import argparse
import math

import matplotlib.pyplot as plt

from femcore import BeamElement, Material, PointLoad, Support, build_model, circle_section, solve


def main(n_elements: int = 10, show: bool = True):
    print("=" * 70)
    print("DEMO: 3D CANTILEVER")
    print("=" * 70)

    # ========================================================================
    # STEP 1: MODEL
    # ========================================================================
    L = 1000.0       # Span (mm)
    F = 1000.0       # Tip force in +y (N)
    steel = Material.steel()
    bar = circle_section(100.0)

    nodes = [(L * k / n_elements, 0.0, 0.0) for k in range(n_elements + 1)]
    elements = [BeamElement(k, k, k + 1, steel, bar) for k in range(n_elements)]
    model = build_model(
        nodes=nodes,
        elements=elements,
        supports=[Support.fixed_at(0)],
        loads=[PointLoad(n_elements, force=(0.0, F, 0.0))],
    )
    print(f"Nodes: {len(model.nodes)}, elements: {len(model.elements)}")

    # ========================================================================
    # STEP 2: SOLVE AND COMPARE
    # ========================================================================
    result = solve(model)
    tip = result.displacement(n_elements)
    expected = F * L ** 3 / (3.0 * steel.E * bar.Izz)

    print()
    print(f"Tip deflection (FEM):    {tip[1]:.6f} mm")
    print(f"Tip deflection (theory): {expected:.6f} mm")
    print(f"Relative error:          {abs(tip[1] - expected) / expected:.2e}")
    print(f"Fixed-end moment:        {result.section_forces[0].Mz_i:.1f} N·mm (theory {-F * L:.1f})")
    print()
    print(result.reaction_table().to_string(index=False))

    # ========================================================================
    # STEP 3: PLOT
    # ========================================================================
    scale = 0.1 * L / max(abs(tip[1]), 1e-12)
    moved = result.displaced_positions(scale=scale)
    xs = [model.node_map()[nid].x for nid in result.node_ids]
    fig, ax = plt.subplots(figsize=(8, 3))
    ax.plot(xs, [0.0] * len(xs), "k--", label="undeformed")
    ax.plot([moved[n].x for n in result.node_ids], [moved[n].y for n in result.node_ids],
            "b-o", markersize=3, label=f"deformed (×{scale:.0f})")
    ax.set_xlabel("x (mm)")
    ax.set_ylabel("y (mm)")
    ax.set_title(f"Cantilever, tip deflection {tip[1]:.3f} mm")
    ax.axis("equal")
    ax.legend()
    ax.grid(True, alpha=0.3)
    if show:
        plt.show()
    return result


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Cantilever beam demo")
    parser.add_argument("--elements", type=int, default=10)
    parser.add_argument("--no-plot", action="store_true")
    args = parser.parse_args()
    main(args.elements, show=not args.no_plot)
