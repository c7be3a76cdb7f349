"""
Mozart - edit MIDI files in measures and beats.

Mozart keeps MIDI documents in memory and lets you query and change them in
musical coordinates rather than raw ticks. It is served as a set of MCP
tools (``python -m mozart``), and the engine underneath can be used
directly:

    ```python
    import asyncio

    import mozart.editor
    import mozart.registry

    registry = mozart.registry.DocumentRegistry()
    registry.create("sketch", mozart.registry.CreateOptions(bpm=96))
    mozart.editor.add_track(registry, "sketch", name="Piano")

    mozart.editor.add_notes(registry, "sketch", 0, [
        mozart.editor.NoteInput(measure=1, beat=1, note_name="C4", duration_beats=1),
        mozart.editor.NoteInput(measure=1, beat=2, note_name="E4", duration_beats=1),
    ])

    asyncio.run(registry.save("sketch", "sketch.mid"))
    ```

What it handles:

- **Tempo and time signature maps.** Measure and beat positions follow
  every time signature change, not just the first.
- **Queries.** Notes by measure, or searched by pitch range, pitch class,
  track and measure range.
- **Edits.** Add, delete, transpose and quantize notes; set tempo and time
  signatures; add tracks and change instruments.
- **Files.** Standard MIDI files are read and written with mido.

Package-level exports: ``Document``, ``DocumentRegistry``.
"""

import mozart.document
import mozart.registry


Document = mozart.document.Document
DocumentRegistry = mozart.registry.DocumentRegistry
