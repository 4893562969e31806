"""
Renders and submits the SLURM batch job that runs the seqliner HTSeq
counting pipeline over a directory of BAM files.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import shlex
import subprocess

DEFAULT_MODULES = [
    "samtools/0.1.18",
    "java",
    "pmc-utils",
    "pmc-scripts",
    "ensembl/78",
    "picard/1.141",
    "bpipe/0.9.8.6_rc2",
    "igvtools",
    "perl-modules",
    "R",
    "vcftools",
    "bedtools/2.21",
    "htseq",
    "pipeline",
    "seqliner/dev",
]


@dataclass
class SlurmJob:
    job_name: str = "htseq_all"
    nodes: int = 1
    ntasks: int = 2
    time: str = "0-120:00:00"
    mem: str = "16G"
    partition: str = "prod"
    mail_type: str = "ALL,TIME_LIMIT_80,TIME_LIMIT_90"
    mail_user: Optional[str] = None
    log_dir: str = "./logs"
    modules: List[str] = field(default_factory=lambda: list(DEFAULT_MODULES))
    pipeline: str = "rna_htseq_count_all"
    # reference genome + library configuration tag passed to seqliner -r
    run_options: str = "rna_mm10,pairedEnd,rna_directional"


def job_from_config(cfg: dict) -> SlurmJob:
    """Builds a SlurmJob from cfg["slurm"]; unknown keys are rejected."""
    section = dict(cfg.get("slurm") or {})
    known = set(SlurmJob.__dataclass_fields__)
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"Unknown slurm config keys: {unknown}")
    return SlurmJob(**section)


def render_batch_script(job: SlurmJob, bam_dir: str, samples: str, out_dir: str) -> str:
    q = shlex.quote
    lines = [
        "#!/bin/bash",
        f"#SBATCH --nodes={job.nodes}",
        f"#SBATCH --ntasks={job.ntasks}",
        f'#SBATCH --job-name="{job.job_name}"',
        f"#SBATCH --time={job.time}",
        f"#SBATCH --mail-type={job.mail_type}",
    ]
    if job.mail_user:
        lines.append(f"#SBATCH --mail-user={job.mail_user}")
    lines += [
        f"#SBATCH --mem={job.mem}",
        # one .out / .err pair per job id
        f'#SBATCH --output="{job.log_dir}/%j.out"',
        f'#SBATCH --error="{job.log_dir}/%j.err"',
        f"#SBATCH --partition={job.partition}",
    ]
    lines += [f"module load {m}" for m in job.modules]
    lines += [
        f"bamdir={q(str(bam_dir))}",
        f"samps={q(str(samples))}",
        f"outdir={q(str(out_dir))}",
        f'srun -n 1 seqliner run {job.pipeline} -o "${{outdir}}" -r {job.run_options} "${{bamdir}}" "${{samps}}"',
    ]
    return "\n".join(lines) + "\n"


def write_batch_script(job: SlurmJob, bam_dir: str, samples: str, out_dir: str, script_path: Path) -> Path:
    script_path = Path(script_path)
    script_path.parent.mkdir(parents=True, exist_ok=True)
    script_path.write_text(render_batch_script(job, bam_dir, samples, out_dir))
    # sbatch does not create the log directory
    Path(job.log_dir).mkdir(parents=True, exist_ok=True)
    return script_path


def submit(script_path: Path, dry_run: bool = False) -> int:
    """
    Runs `sbatch <script>` and returns its exit code unchanged.
    The job's own success or failure is left to the scheduler's logs.
    """
    cmd = ["sbatch", str(script_path)]
    if dry_run:
        print(f"[SLURM] dry run: {' '.join(cmd)}")
        return 0
    result = subprocess.run(cmd, check=False, capture_output=True, text=True)
    if result.stdout.strip():
        print(f"[SLURM] {result.stdout.strip()}")
    if result.returncode != 0:
        print(f"[SLURM] sbatch exited with {result.returncode}: {result.stderr.strip()}")
    return result.returncode
