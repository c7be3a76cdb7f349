"""General MIDI Level 1 program names.

``GM_PROGRAM_NAMES[n]`` is the instrument name for program number ``n``
(0-127). Names are lower case, matching how most MIDI tooling reports them.
"""

import typing


GM_PROGRAM_NAMES: typing.List[str] = [
	# Piano
	"acoustic grand piano", "bright acoustic piano", "electric grand piano", "honky-tonk piano",
	"electric piano 1", "electric piano 2", "harpsichord", "clavi",
	# Chromatic percussion
	"celesta", "glockenspiel", "music box", "vibraphone",
	"marimba", "xylophone", "tubular bells", "dulcimer",
	# Organ
	"drawbar organ", "percussive organ", "rock organ", "church organ",
	"reed organ", "accordion", "harmonica", "tango accordion",
	# Guitar
	"acoustic guitar (nylon)", "acoustic guitar (steel)", "electric guitar (jazz)", "electric guitar (clean)",
	"electric guitar (muted)", "overdriven guitar", "distortion guitar", "guitar harmonics",
	# Bass
	"acoustic bass", "electric bass (finger)", "electric bass (pick)", "fretless bass",
	"slap bass 1", "slap bass 2", "synth bass 1", "synth bass 2",
	# Strings
	"violin", "viola", "cello", "contrabass",
	"tremolo strings", "pizzicato strings", "orchestral harp", "timpani",
	# Ensemble
	"string ensemble 1", "string ensemble 2", "synthstrings 1", "synthstrings 2",
	"choir aahs", "voice oohs", "synth voice", "orchestra hit",
	# Brass
	"trumpet", "trombone", "tuba", "muted trumpet",
	"french horn", "brass section", "synthbrass 1", "synthbrass 2",
	# Reed
	"soprano sax", "alto sax", "tenor sax", "baritone sax",
	"oboe", "english horn", "bassoon", "clarinet",
	# Pipe
	"piccolo", "flute", "recorder", "pan flute",
	"blown bottle", "shakuhachi", "whistle", "ocarina",
	# Synth lead
	"lead 1 (square)", "lead 2 (sawtooth)", "lead 3 (calliope)", "lead 4 (chiff)",
	"lead 5 (charang)", "lead 6 (voice)", "lead 7 (fifths)", "lead 8 (bass + lead)",
	# Synth pad
	"pad 1 (new age)", "pad 2 (warm)", "pad 3 (polysynth)", "pad 4 (choir)",
	"pad 5 (bowed)", "pad 6 (metallic)", "pad 7 (halo)", "pad 8 (sweep)",
	# Synth effects
	"fx 1 (rain)", "fx 2 (soundtrack)", "fx 3 (crystal)", "fx 4 (atmosphere)",
	"fx 5 (brightness)", "fx 6 (goblins)", "fx 7 (echoes)", "fx 8 (sci-fi)",
	# Ethnic
	"sitar", "banjo", "shamisen", "koto",
	"kalimba", "bag pipe", "fiddle", "shanai",
	# Percussive
	"tinkle bell", "agogo", "steel drums", "woodblock",
	"taiko drum", "melodic tom", "synth drum", "reverse cymbal",
	# Sound effects
	"guitar fret noise", "breath noise", "seashore", "bird tweet",
	"telephone ring", "helicopter", "applause", "gunshot",
]


def program_name (program: typing.Optional[int]) -> str:

	"""Return the GM name for a program number, or ``"unknown"`` if out of range."""

	if program is None or not 0 <= program < len(GM_PROGRAM_NAMES):
		return "unknown"

	return GM_PROGRAM_NAMES[program]
