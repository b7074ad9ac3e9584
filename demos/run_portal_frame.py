# File: demos/run_portal_frame.py
"""
DEMO: PORTAL FRAME WITH PINNED AND RIGID BEAM CONNECTIONS
=========================================================

PURPOSE:
--------
The same fixed-base portal solved twice:

1. Rigid beam-to-column connections: the frame sways as a whole and
   the beam picks up moment at both ends.
2. Beam pinned to the columns (Joint.pin): the beam becomes a link,
   each column works as a cantilever and takes about H/2, so the base
   moments approach H·h/2.

Gravity on the beam is a local UDL; wind is a point load at the left
top. Section forces are printed as a pandas table.

UNITS: N, mm
"""

import matplotlib.pyplot as plt

from femcore import (
    BeamElement,
    ElementLoad,
    Joint,
    Material,
    PointLoad,
    Support,
    build_model,
    h_section,
    solve,
)

h, span = 3000.0, 6000.0     # column height, beam span (mm)
H = 10000.0                  # wind at the left top (N)
q = 5.0                      # gravity UDL on the beam (N/mm)
MEMBERS = [(0, 1), (1, 2), (3, 2)]


def portal(joints=()):
    steel = Material.steel()
    column = h_section(200.0, 200.0, 8.0, 12.0)
    beam = h_section(300.0, 150.0, 6.5, 9.0)
    return build_model(
        nodes=[(0, 0, 0), (0, 0, h), (span, 0, h), (span, 0, 0)],
        elements=[
            BeamElement(k, ni, nj, steel, beam if k == 1 else column)
            for k, (ni, nj) in enumerate(MEMBERS)
        ],
        supports=[Support.fixed_at(0), Support.fixed_at(3)],
        loads=[PointLoad(1, force=(H, 0.0, 0.0)), ElementLoad(1, q=(0.0, 0.0, -q))],
        joints=joints,
    )


def main(show: bool = True):
    print("=" * 70)
    print("DEMO: PORTAL FRAME")
    print("=" * 70)

    results = {
        "rigid": solve(portal()),
        "pinned beam": solve(portal(joints=[Joint.pin(1)])),
    }

    for label, result in results.items():
        drift = result.displacement(1)[0]
        print()
        print(f"--- {label} connections ---")
        print(f"Drift at the left top: {drift:.3f} mm (h/{h / abs(drift):.0f})")
        print(result.section_force_table()[["element_id", "Fx_i", "My_i", "My_j"]].to_string(index=False))

    pinned = results["pinned beam"]
    print()
    print(f"Base moment, pinned beam: {abs(pinned.section_forces[0].My_i):.3e} N·mm "
          f"(cantilever estimate H·h/2 = {H * h / 2:.3e})")

    fig, ax = plt.subplots(figsize=(8, 5))
    for (label, result), style in zip(results.items(), ("b-o", "r-s")):
        scale = 20.0
        moved = result.displaced_positions(scale=scale)
        for el, (ni, nj) in enumerate(MEMBERS):
            ax.plot([moved[ni].x, moved[nj].x], [moved[ni].z, moved[nj].z], style,
                    label=f"{label} (×{scale:.0f})" if el == 0 else None)
    ax.plot([0, 0, span, span], [0, h, h, 0], "k--", label="undeformed")
    ax.set_xlabel("x (mm)")
    ax.set_ylabel("z (mm)")
    ax.axis("equal")
    ax.legend()
    ax.grid(True, alpha=0.3)
    if show:
        plt.show()
    return results


if __name__ == "__main__":
    main()
