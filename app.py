#!/usr/bin/env python3
"""
Streamlit web app for interactive generation of distinct color sets.
"""

import streamlit as st
import numpy as np
from color_set_generator import (
    GENERATORS, MAX_REPLACEMENTS, N_ITERATIONS,
    SimulatedAnnealingGenerator, palette_distances, rgb_to_lab
)

st.set_page_config(page_title="Distinct Color Sets", layout="wide")

st.title("🎨 Distinct Color Set Generator")

col1, col2 = st.columns(2)

with col1:
    st.subheader("Configuration")

    n_colors = st.slider(
        "Number of colors:",
        min_value=1,
        max_value=50,
        value=8,
        key="n_colors",
        help="Size of the color set to generate"
    )

    generator_name = st.selectbox(
        "Color generator",
        options=sorted(GENERATORS),
        index=sorted(GENERATORS).index("uniform"),
        key="generator",
        help="uniform: whole RGB cube; pastel: every channel in 128-255"
    )

    seed = st.number_input("Seed (optional)", min_value=0, value=None, step=1, key="seed",
                           help="Fix the seed to reproduce a color set")

with col2:
    st.subheader("Search budget")

    iters = st.number_input("Annealing iterations", min_value=1, max_value=1000,
                            value=N_ITERATIONS, key="iterations")
    replacements = st.number_input("Candidates per step", min_value=10, max_value=100000,
                                   value=MAX_REPLACEMENTS, step=100, key="replacements",
                                   help="Lower values are faster but search less")

status = st.empty()
progress = st.progress(0.0)

if st.button("Generate", key="generate"):
    sampler_seed, anneal_seed = np.random.SeedSequence(
        None if seed is None else int(seed)).spawn(2)

    def _ui_callback(palette, meta=None):
        progress.progress((meta['iteration'] + 1) / int(iters))
        status.text(f"Iteration {meta['iteration'] + 1}: total distance "
                    f"{meta['distance_before']:.1f} -> {meta['distance_after']:.1f}")

    generator = SimulatedAnnealingGenerator(
        GENERATORS[generator_name](np.random.default_rng(sampler_seed)),
        np.random.default_rng(anneal_seed),
        n_iterations=int(iters),
        max_replacements=int(replacements),
        callback=_ui_callback,
    )
    with st.spinner("Optimizing color set..."):
        colors = generator.generate(int(n_colors))
    # Darkest first
    st.session_state['color_set'] = sorted(colors, key=lambda c: rgb_to_lab(c)[0])
    status.success(f"Generated {len(colors)} colors")

palette_colors = st.session_state.get('color_set')

if palette_colors:
    labs = rgb_to_lab(palette_colors).reshape(len(palette_colors), 3)

    # Display color swatches as native HTML
    st.subheader("Generated Color Set")
    cols = st.columns(len(palette_colors))
    for col, color, lab in zip(cols, palette_colors, labs):
        with col:
            text_color = 'white' if lab[0] < 50 else '#333333'
            swatch_html = f"""
            <div style="
                background-color: {color.hex};
                border: 2px solid #333;
                border-radius: 8px;
                padding: 12px;
                text-align: center;
                color: {text_color};
                font-family: monospace;
                box-shadow: 0 2px 8px rgba(0,0,0,0.2);
                min-height: 120px;
                display: flex;
                flex-direction: column;
                justify-content: flex-end;
            ">
                <div style="font-size: 12px; font-weight: bold; margin-bottom: 4px;">{color.hex}</div>
                <div style="font-size: 9px;">RGB({color.r}, {color.g}, {color.b})</div>
            </div>
            """
            st.markdown(swatch_html, unsafe_allow_html=True)

    # Color details table
    st.subheader("Color Details")
    color_data = []
    for color, lab in zip(palette_colors, labs):
        color_data.append({
            "Hex": color.hex,
            "RGB": f"{color.r}, {color.g}, {color.b}",
            "Packed": color.to_signed_int(),
            "L*": f"{lab[0]:.1f}",
            "a*": f"{lab[1]:.1f}",
            "b*": f"{lab[2]:.1f}",
        })
    st.dataframe(color_data, width="stretch")

    if len(palette_colors) > 1:
        # Distance matrix, closer pairs drawn hotter
        st.subheader("CIE Lab Distance Matrix")
        distance_matrix = palette_distances(palette_colors)
        n_palette = len(palette_colors)
        max_distance = np.max(distance_matrix)
        swatches = [f'<div class="swatch" style="background: {c.hex};"></div>' for c in palette_colors]
        rows = ['<tr><th></th>' + ''.join(f'<th>{s}</th>' for s in swatches) + '</tr>']
        for i, swatch in enumerate(swatches):
            cells = []
            for j in range(n_palette):
                if i == j:
                    cells.append('<td>&mdash;</td>')
                    continue
                heat = 1 - distance_matrix[i, j] / max_distance if max_distance > 0 else 0
                cells.append(f'<td style="background: rgb(255, {int(255 * (1 - 0.7 * heat))}, '
                             f'{int(100 * (1 - heat))});">{distance_matrix[i, j]:.1f}</td>')
            rows.append(f'<tr><th>{swatch}</th>' + ''.join(cells) + '</tr>')
        st.markdown(
            '<style>'
            '.distance-matrix {border-collapse: collapse; margin: 20px auto; font: 600 11px monospace;}'
            '.distance-matrix td, .distance-matrix th {border: 1px solid #ddd; text-align: center; min-width: 50px; height: 50px;}'
            '.distance-matrix .swatch {width: 40px; height: 40px; border: 2px solid #333; margin: 0 auto;}'
            '</style>'
            '<table class="distance-matrix">' + ''.join(rows) + '</table>',
            unsafe_allow_html=True)

        # Distance statistics
        st.subheader("Distance Statistics")
        stat1, stat2, stat3 = st.columns(3)
        distances = distance_matrix[np.triu_indices(n_palette, k=1)]
        with stat1:
            st.metric("Min Pairwise Distance", f"{distances.min():.2f}")
        with stat2:
            st.metric("Max Pairwise Distance", f"{distances.max():.2f}")
        with stat3:
            st.metric("Avg Pairwise Distance", f"{distances.mean():.2f}")
