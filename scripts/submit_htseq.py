"""
Submits the seqliner HTSeq counting job for a directory of BAM files.
"""

from __future__ import annotations
import argparse
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from wts.utils.io import load_config, DEFAULT_CONFIG
from wts.jobs.seqliner import job_from_config, write_batch_script, submit


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("bam_dir", help="Directory holding the BAM files")
    ap.add_argument("samples", help="Sample list passed through to seqliner")
    ap.add_argument("out_dir", help="Directory seqliner writes count files to")
    ap.add_argument("--config", default=DEFAULT_CONFIG)
    ap.add_argument("--script", default="htseq_all.sbatch", help="Where to write the batch script")
    ap.add_argument("--dry-run", action="store_true", help="Write the script but do not call sbatch")
    args = ap.parse_args()

    cfg = load_config(args.config)
    job = job_from_config(cfg)

    script = write_batch_script(job, args.bam_dir, args.samples, args.out_dir, Path(args.script))
    print(f"[SLURM] batch script -> {script}")

    sys.exit(submit(script, dry_run=args.dry_run))


if __name__ == "__main__":
    main()
