#!/usr/bin/env python3
"""
Command-line composer

Generates a sequence from a preset or explicit parameters, prints it as a
note table, and optionally plays it on the default audio device and/or
exports it as a MIDI file.

Usage:
    neusicgen --preset ambient_drift --play
    neusicgen --genre jazz --key Dm --bars 8 --seed 7 --export out.mid
"""

import argparse
import asyncio
import logging
import random
import sys
from typing import Optional

from tabulate import tabulate

from composition.generation_params import GenerationParameters, NoteSequence
from composition.musical_tables import key_label
from composition.sequence_generator import SequenceGenerator
from server.audio_output import SoundDeviceOutput
from server.config import get_config
from server.exceptions import NeusicgenError
from server.logging_config import setup_logging
from server.midi_encoder import write_midi_file
from server.oscillator_renderer import OscillatorRenderer
from server.presets import get_preset, list_presets

logger = logging.getLogger(__name__)


def build_parameters(args: argparse.Namespace) -> GenerationParameters:
    """Resolve generation parameters from a preset plus explicit overrides."""
    base = get_preset(args.preset) if args.preset else GenerationParameters.default()

    return GenerationParameters(
        genre=args.genre if args.genre is not None else base.genre,
        creativity=args.creativity if args.creativity is not None else base.creativity,
        tempo=args.tempo if args.tempo is not None else base.tempo,
        key=args.key if args.key is not None else base.key,
        duration=args.bars if args.bars is not None else base.duration,
    )


def format_sequence(sequence: NoteSequence) -> str:
    """Render a sequence as a text table with a one-line summary."""
    rows = [
        [i, note.name, note.pitch, f"{note.time:.3f}", f"{note.duration:.3f}", note.velocity]
        for i, note in enumerate(sequence.notes)
    ]
    table = tabulate(
        rows,
        headers=["#", "Note", "Pitch", "Time", "Duration", "Velocity"],
        tablefmt="simple",
    )
    summary = (
        f"{len(sequence)} notes | {sequence.genre} | {key_label(sequence.key)} | "
        f"{sequence.tempo} BPM | {sequence.total_beats:.2f} beats"
    )
    return f"{table}\n\n{summary}"


async def run(args: argparse.Namespace) -> int:
    config = get_config()
    params = build_parameters(args)

    rng = random.Random(args.seed) if args.seed is not None else None
    delay = (0.0, 0.0) if args.no_delay else config.generation_delay_range_ms
    generator = SequenceGenerator(rng=rng, delay_range_ms=delay)

    print("Generating composition...", file=sys.stderr)
    sequence = await generator.generate(params)
    print(format_sequence(sequence))

    if args.export is not None:
        path = write_midi_file(
            sequence,
            path=args.export or None,
            export_dir=config.export_dir,
            include_note_events=args.full_midi,
        )
        print(f"MIDI written to: {path}", file=sys.stderr)

    if args.play:
        renderer = OscillatorRenderer(
            sample_rate=config.sample_rate,
            time_scale=config.playback_time_scale,
            attack_sec=config.attack_ms / 1000.0,
            hold_fraction=config.hold_fraction,
            peak_gain=config.peak_gain,
        )
        session = await renderer.play(sequence, SoundDeviceOutput(device=args.device))
        try:
            await session.wait()
        except asyncio.CancelledError:
            session.cancel()
            raise

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Generate, play and export melodies")
    parser.add_argument(
        "--preset",
        choices=[p["id"] for p in list_presets()],
        help="Start from a named preset",
    )
    parser.add_argument("--genre", help="Genre (classical, jazz, electronic, ambient, minimalist, baroque)")
    parser.add_argument("--creativity", type=float, help="Randomness, 0.1-1.0")
    parser.add_argument("--tempo", type=int, help="Tempo in BPM")
    parser.add_argument("--key", help="Key (C, G, D, A, Am, Em, Dm)")
    parser.add_argument("--bars", type=int, help="Length in bars (4 notes per bar)")
    parser.add_argument("--seed", type=int, help="Seed for a reproducible sequence")
    parser.add_argument("--no-delay", action="store_true", help="Skip the simulated generation delay")
    parser.add_argument("--play", action="store_true", help="Play on the default audio device")
    parser.add_argument("--device", help="sounddevice output device name or index")
    parser.add_argument(
        "--export",
        nargs="?",
        const="",
        help="Write a .mid file to this path (default: a timestamped file in the export dir)",
    )
    parser.add_argument(
        "--full-midi",
        action="store_true",
        help="Write note events instead of the stub track (incomplete)",
    )

    args = parser.parse_args(argv)
    if args.device is not None and args.device.isdigit():
        args.device = int(args.device)

    setup_logging()

    try:
        return asyncio.run(run(args))
    except NeusicgenError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
