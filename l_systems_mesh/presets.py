from l_systems_mesh.config import LSystemConfig

LSYSTEM_PRESETS = {
    # Classic branching plants
    "tree1": {
        "axiom": "X",
        "rules": "X=F-[![X]+X]+F[+F!X]-X\nF=FF",
        "angle": 22.5,
        "iterations": 6,
        "step_length": 1.5,
        "width": 0.961,
        "taper": 0.69,
        "angle_variance": 2,
        "color_base": "#5d4037",
        "color_tip": "#22c55e",
        "color_leaf": "#f0abfc",
        "description": "Bracketed plant with gradual taper between branchings"
    },
    "tree2": {
        "axiom": "F",
        "rules": "F=FF!+[+F-F-F]-[-F+F+F]",
        "angle": 25,
        "iterations": 4,
        "step_length": 2,
        "width": 0.732,
        "taper": 0.95,
        "color_base": "#2d1b0e",
        "color_tip": "#84cc16",
        "color_leaf": "#facc15",
        "description": "Bushy tree with opposing side shoots"
    },
    "pine": {
        "axiom": "FX",
        "rules": "X=![+FX][-FX][&FX][^FX]\nF=FF",
        "angle": 22,
        "iterations": 8,
        "step_length": 0.5,
        "width": 6.699,
        "taper": 0.58,
        "angle_variance": 14,
        "color_base": "#3f2e18",
        "color_tip": "#05850d",
        "color_leaf": "#05850d",
        "description": "Four-way branching conifer"
    },

    # Ferns
    "fern": {
        "axiom": "X",
        "rules": "X=F[+!X][ -!X]F!X\nF=FF",
        "angle": 25,
        "iterations": 6,
        "step_length": 1,
        "width": 0.905,
        "taper": 0.7,
        "color_base": "#1a642e",
        "color_tip": "#22c55e",
        "color_leaf": "#ccfbf1",
        "description": "Planar fern"
    },
    "fern3d": {
        "axiom": "X",
        "rules": "X=F///+[[!X]///-!X]///-F[///-F!X]///+!X\nF=FF",
        "angle": 22.5,
        "iterations": 7,
        "step_length": 0.1,
        "width": 0.370,
        "taper": 0.81,
        "angle_variance": 6,
        "color_base": "#2e5c18",
        "color_tip": "#22c55e",
        "color_leaf": "#86efac",
        "description": "Fern with rolled fronds"
    },
    "barnsley": {
        "axiom": "X",
        "rules": "X=F+[[!X]-!X]-F[-F!X]+!X\nF=FF",
        "angle": 25,
        "iterations": 7,
        "step_length": 1.5,
        "width": 3.754,
        "taper": 0.73,
        "color_base": "#14532d",
        "color_tip": "#22c55e",
        "color_leaf": "#86efac",
        "description": "Barnsley-style fern"
    },

    # Leafy bush
    "bush": {
        "axiom": "A",
        "rules": "A=[&FL!A]/////'[&FL!A]///////'[&FL!A]\nF=S/////F\nS=FL\nL=['''^^{-f+f+f-|-f+f+f}]",
        "angle": 22.5,
        "iterations": 6,
        "step_length": 2,
        "width": 0.607,
        "taper": 0.61,
        "color_base": "#3f2e18",
        "color_tip": "#0cad00",
        "color_leaf": "#f43f5e",
        "description": "Three-way bush with leaves along every shoot"
    },

    # Geometric structures
    "spire": {
        "axiom": "F",
        "rules": "F=F[&+F][&-F][^+F][^-F]//F",
        "angle": 28.5,
        "iterations": 6,
        "step_length": 2,
        "width": 0.17,
        "taper": 1.0,
        "angle_variance": 2,
        "color_base": "#4a4036",
        "color_tip": "#a8a8a0",
        "color_leaf": "#ffcc00",
        "description": "Spire with four diagonal branches per node"
    },
    "hilbert": {
        "axiom": "A",
        "rules": (
            "A=B-F+CFC+F-D&F^D-F+&&CFC+F+B//\n"
            "B=A&F^CFB^F^D^^-F-D^|F^B|FC^F^A//\n"
            "C=|D^|F^B-F+C^F^A&&FA&F^C+F+B^F^D//\n"
            "D=|CFB-F+B|FA&F^A&&FB-F+B|FC//"
        ),
        "angle": 90,
        "iterations": 3,
        "step_length": 4,
        "width": 0.2,
        "taper": 1.0,
        "color_base": "#0ea5e9",
        "color_tip": "#d946ef",
        "color_leaf": "#ffffff",
        "description": "3D Hilbert curve"
    },
    "twisted": {
        "axiom": "F",
        "rules": "F=F[&+F][&-F]///F",
        "angle": 30,
        "iterations": 5,
        "step_length": 2,
        "width": 0.15,
        "taper": 1.0,
        "color_base": "#44403c",
        "color_tip": "#a8a29e",
        "color_leaf": "#fbbf24",
        "description": "Twisting trunk with paired side branches"
    },
}


def config_from_preset(name: str, **overrides) -> LSystemConfig:
    """Build a config from a named preset; options it leaves out keep their defaults."""
    values = dict(LSYSTEM_PRESETS[name])
    values.update(overrides)
    return LSystemConfig.from_dict(values)
