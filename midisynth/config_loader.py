"""
Configuration loader for arrangement documents.

An arrangement binds MIDI programs to instruments and routes MIDI
channels to output buses. Documents are JSON or YAML with the sections
``metadata``, ``sample_banks``, ``waveforms``, ``envelopes``,
``instruments`` and ``outputs``. All formulas are parsed and all
references resolved at load time, so a bad document fails before any
rendering starts.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import numpy as np
import yaml

from .expression import ParseError
from .sources import (
    Envelope,
    EnvPhase,
    Instrument,
    Modulator,
    PitchCache,
    SignalSource,
    SourceFactory,
)
from .utils import SAMPLE_RATE, MidisynthError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


class ConfigLoadError(MidisynthError):
    """Raised when configuration loading fails."""
    pass


@dataclass(frozen=True)
class OutputBus:
    """A named mono output aggregating every note on a set of channels."""
    name: str
    output_file: str
    channels: Tuple[int, ...]

    def routes(self, channel: int) -> bool:
        return channel in self.channels


@dataclass
class RenderConfig:
    """
    Render settings taken from the arrangement metadata.

    Attributes:
        sample_rate: Output sample rate (fixed for the whole render)
        strict: Abort on notes with no mapped instrument (otherwise skip them)
    """
    sample_rate: int = SAMPLE_RATE
    strict: bool = True


@dataclass
class Arrangement:
    """Fully resolved arrangement, ready to render."""
    instruments: List[Instrument]
    outputs: List[OutputBus]
    render: RenderConfig = field(default_factory=RenderConfig)
    input_file: Optional[str] = None
    comments: str = ""
    sample_banks: Dict[str, SignalSource] = field(default_factory=dict)
    waveforms: Dict[str, SignalSource] = field(default_factory=dict)
    envelopes: Dict[str, SignalSource] = field(default_factory=dict)

    def find_instrument(self, program: int) -> Optional[Instrument]:
        """First non-percussion instrument mapped to ``program``, or None."""
        for instrument in self.instruments:
            if instrument.matches(program):
                return instrument
        return None


def _require(section: Dict[str, Any], key: str, where: str) -> Any:
    if not isinstance(section, dict):
        raise ConfigLoadError(f"{where} must be a mapping, got {type(section).__name__}")
    if key not in section:
        raise ConfigLoadError(f"{where} is missing required key '{key}'")
    return section[key]


class ConfigLoader:
    """
    Loads arrangement documents from JSON/YAML files with caching.

    Attributes:
        clip_loader: Optional clip decoder handed to every sample bank
    """

    def __init__(
        self,
        clip_loader: Optional[Callable[[str], np.ndarray]] = None,
        max_cached_pitches: Optional[int] = None,
    ):
        """
        Args:
            clip_loader: Decoder for sample bank clips (defaults to soundfile)
            max_cached_pitches: Per-bank cache cap; None keeps every pitch
        """
        self.clip_loader = clip_loader
        self.max_cached_pitches = max_cached_pitches
        self._cache: Dict[str, Dict[str, Any]] = {}

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def load_document(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load and cache the raw document at ``path``.

        Raises:
            ConfigLoadError: If the file is missing or cannot be parsed
        """
        path = Path(path)
        cache_key = str(path.resolve())
        if cache_key in self._cache:
            return self._cache[cache_key]

        if not path.exists():
            raise ConfigLoadError(f"Configuration file not found: {path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                if path.suffix.lower() in YAML_SUFFIXES:
                    data = yaml.safe_load(f) or {}
                else:
                    data = json.load(f)
        except yaml.YAMLError as e:
            raise ConfigLoadError(f"Failed to parse YAML file {path}: {e}")
        except json.JSONDecodeError as e:
            raise ConfigLoadError(f"Failed to parse JSON file {path}: {e}")
        except OSError as e:
            raise ConfigLoadError(f"Failed to load configuration file {path}: {e}")

        if not isinstance(data, dict):
            raise ConfigLoadError(f"Arrangement document {path} must be a mapping")

        self._cache[cache_key] = data
        logger.debug(f"Loaded arrangement document from {path}")
        return data

    def load(self, path: Union[str, Path]) -> Arrangement:
        """Load an arrangement file and resolve it into instruments and buses."""
        path = Path(path)
        data = self.load_document(path)
        return self.build(data, base_dir=path.parent)

    def clear_cache(self) -> None:
        self._cache.clear()

    # -------------------------------------------------------------------------
    # Building
    # -------------------------------------------------------------------------

    def build(self, data: Dict[str, Any], base_dir: Optional[Path] = None) -> Arrangement:
        """
        Resolve a raw arrangement mapping.

        Args:
            data: Parsed document
            base_dir: Directory that relative clip and MIDI paths are relative to

        Raises:
            ConfigLoadError: On malformed sections, bad formulas or easing
                names, and unresolved carrier/modulator references
        """
        base_dir = Path(base_dir) if base_dir is not None else Path.cwd()

        metadata = data.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise ConfigLoadError("Arrangement metadata must be a mapping")
        try:
            render = RenderConfig(
                sample_rate=int(metadata.get("sample_rate", SAMPLE_RATE)),
                strict=bool(metadata.get("strict", True)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigLoadError(f"Invalid metadata: {e}")
        input_file = metadata.get("input_file")
        if input_file is not None:
            input_file = str(self._resolve(input_file, base_dir))

        sample_banks = self._build_sample_banks(data.get("sample_banks") or [], base_dir)
        waveforms = self._build_waveforms(data.get("waveforms") or [])
        envelopes = self._build_envelopes(data.get("envelopes") or [])

        instruments = [
            self._build_instrument(entry, sample_banks, waveforms, envelopes)
            for entry in data.get("instruments") or []
        ]
        outputs = [self._build_output(entry) for entry in data.get("outputs") or []]

        logger.debug(
            f"Built arrangement: {len(instruments)} instruments, {len(outputs)} outputs, "
            f"{len(waveforms)} waveforms, {len(envelopes)} envelopes, "
            f"{len(sample_banks)} sample banks"
        )

        return Arrangement(
            instruments=instruments,
            outputs=outputs,
            render=render,
            input_file=input_file,
            comments=str(metadata.get("comments", "")),
            sample_banks=sample_banks,
            waveforms=waveforms,
            envelopes=envelopes,
        )

    @staticmethod
    def _resolve(path: str, base_dir: Path) -> Path:
        p = Path(path)
        return p if p.is_absolute() else base_dir / p

    def _build_sample_banks(self, entries: List[Dict[str, Any]], base_dir: Path) -> Dict[str, SignalSource]:
        banks = {}
        for entry in entries:
            name = _require(entry, "name", "sample bank")
            files = _require(entry, "files", f"sample bank '{name}'")
            if not isinstance(files, dict):
                raise ConfigLoadError(f"Sample bank '{name}' files must map MIDI pitches to clip paths")
            resolved = {pitch: str(self._resolve(p, base_dir)) for pitch, p in files.items()}
            try:
                banks[name] = SourceFactory.create(
                    'sample_bank',
                    name=name,
                    files=resolved,
                    loader=self.clip_loader,
                    cache=PitchCache(self.max_cached_pitches),
                )
            except ValueError as e:
                raise ConfigLoadError(f"Invalid sample bank '{name}': {e}")
        return banks

    def _build_waveforms(self, entries: List[Dict[str, Any]]) -> Dict[str, SignalSource]:
        waveforms = {}
        for entry in entries:
            name = _require(entry, "name", "waveform")
            equation = _require(entry, "equation", f"waveform '{name}'")
            try:
                waveforms[name] = SourceFactory.create('waveform', name=name, equation=str(equation))
            except ParseError as e:
                raise ConfigLoadError(f"Invalid equation for waveform '{name}' ({equation!r}): {e}")
        return waveforms

    def _build_envelopes(self, entries: List[Dict[str, Any]]) -> Dict[str, SignalSource]:
        envelopes = {}
        for entry in entries:
            name = _require(entry, "name", "envelope")
            phases = [
                self._build_phase(phase, f"envelope '{name}' phase {i}")
                for i, phase in enumerate(_require(entry, "phases", f"envelope '{name}'"))
            ]
            try:
                envelopes[name] = SourceFactory.create('envelope', name=name, phases=phases)
            except ValueError as e:
                raise ConfigLoadError(f"Invalid envelope '{name}': {e}")
        return envelopes

    @staticmethod
    def _build_phase(phase: Dict[str, Any], where: str) -> EnvPhase:
        # "end_val" is the older name for the delta
        if "delta_val" in phase:
            delta = phase["delta_val"]
        else:
            delta = _require(phase, "end_val", where)
        try:
            return EnvPhase(
                start_time=float(_require(phase, "start_time", where)),
                end_time=float(_require(phase, "end_time", where)),
                start_val=float(_require(phase, "start_val", where)),
                delta_val=float(delta),
                ease_fn=str(phase.get("ease_fn", "Linear")),
            )
        except (TypeError, ValueError) as e:
            raise ConfigLoadError(f"Invalid {where}: {e}")

    @staticmethod
    def _build_instrument(
        entry: Dict[str, Any],
        sample_banks: Dict[str, SignalSource],
        waveforms: Dict[str, SignalSource],
        envelopes: Dict[str, SignalSource],
    ) -> Instrument:
        name = _require(entry, "name", "instrument")
        where = f"instrument '{name}'"
        carrier_name = _require(entry, "carrier", where)

        if carrier_name in sample_banks:
            carrier = sample_banks[carrier_name]
        elif carrier_name in waveforms:
            carrier = waveforms[carrier_name]
        else:
            raise ConfigLoadError(
                f"{where} uses unknown carrier '{carrier_name}' "
                f"(carriers must be a sample bank or a waveform)"
            )

        modulators = []
        for mod in entry.get("am") or []:
            mod_name = _require(mod, "modulator", f"{where} modulator")
            if mod_name in waveforms:
                source = waveforms[mod_name]
            elif mod_name in envelopes:
                source = envelopes[mod_name]
            else:
                raise ConfigLoadError(
                    f"{where} uses unknown modulator '{mod_name}' "
                    f"(modulators must be a waveform or an envelope)"
                )
            try:
                depth = float(mod.get("depth", 1.0))
            except (TypeError, ValueError) as e:
                raise ConfigLoadError(f"Invalid depth for {where} modulator '{mod_name}': {e}")
            modulators.append(Modulator(source=source, depth=depth))

        try:
            program = int(_require(entry, "midi_inst", where))
        except (TypeError, ValueError) as e:
            raise ConfigLoadError(f"Invalid midi_inst for {where}: {e}")

        return Instrument(
            name=name,
            program=program,
            carrier=carrier,
            percussion=bool(entry.get("midi_percussion", False)),
            modulators=modulators,
        )

    @staticmethod
    def _build_output(entry: Dict[str, Any]) -> OutputBus:
        output_file = str(_require(entry, "output_file", "output"))
        channels = _require(entry, "channels", f"output '{output_file}'")
        try:
            channels = tuple(int(c) for c in channels)
        except (TypeError, ValueError) as e:
            raise ConfigLoadError(f"Invalid channels for output '{output_file}': {e}")
        return OutputBus(
            name=str(entry.get("name", output_file)),
            output_file=output_file,
            channels=channels,
        )


def load_arrangement(path: Union[str, Path], **kwargs) -> Arrangement:
    """Convenience wrapper: ``ConfigLoader(**kwargs).load(path)``."""
    return ConfigLoader(**kwargs).load(path)
