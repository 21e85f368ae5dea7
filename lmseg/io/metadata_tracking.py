'''
author: zyx
date: 2026-10-16
last_modified: 2026-10-16
description:
Run Metadata for lmseg
======================

Records what was run, on which inputs, with which parameters, so that a
label map on disk can be traced back to the command that produced it.

Classes:
    ProcessingStep: Record a single processing step in the pipeline
    RunMetadata: Metadata for one segmentation run

Functions:
    metadata_path: JSON path stored next to an output file
'''

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


@dataclass
class ProcessingStep:
    '''Record a single processing step in the pipeline.'''
    step_name: str
    timestamp: str
    parameters: Dict[str, Any]
    input_data: List[str]
    output_data: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class RunMetadata:
    '''Metadata for tracking one segmentation run.'''
    command: str
    inputs: List[str] = field(default_factory=list)
    output: Optional[str] = None
    parameters: Dict[str, Any] = field(default_factory=dict)
    processing_date: str = field(default_factory=lambda: datetime.now().isoformat())
    processing_steps: List[ProcessingStep] = field(default_factory=list)
    notes: Optional[str] = None

    def add_step(
        self,
        step_name: str,
        parameters: Optional[Dict[str, Any]] = None,
        input_data: Optional[List[str]] = None,
        output_data: Optional[str] = None,
        notes: Optional[str] = None
    ) -> ProcessingStep:
        '''Append a processing step stamped with the current time.'''
        step = ProcessingStep(
            step_name=step_name,
            timestamp=datetime.now().isoformat(),
            parameters=dict(parameters or {}),
            input_data=list(input_data or []),
            output_data=output_data,
            notes=notes
        )
        self.processing_steps.append(step)
        return step

    @property
    def step_names(self) -> List[str]:
        return [step.step_name for step in self.processing_steps]

    def to_json(self, filepath: Union[str, Path]):
        '''Save metadata to JSON file.'''
        with open(filepath, 'w') as f:
            json.dump(asdict(self), f, indent=2, default=str)

    @classmethod
    def from_json(cls, filepath: Union[str, Path]):
        '''Load metadata from JSON file.'''
        with open(filepath, 'r') as f:
            data = json.load(f)
        # Convert processing steps back to ProcessingStep objects
        data['processing_steps'] = [ProcessingStep(**step) for step in data['processing_steps']]
        return cls(**data)


def metadata_path(output: Union[str, Path]) -> Path:
    '''`labels.tif` -> `labels.json` in the same directory.'''
    return Path(output).with_suffix('.json')
