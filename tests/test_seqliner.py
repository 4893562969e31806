import subprocess
import pytest

from wts.jobs import seqliner
from wts.jobs.seqliner import SlurmJob, job_from_config, render_batch_script, write_batch_script, submit


def test_render_batch_script_defaults():
    script = render_batch_script(SlurmJob(), "/data/bams", "samples.txt", "/data/counts")
    lines = script.splitlines()

    assert lines[0] == "#!/bin/bash"
    assert '#SBATCH --job-name="htseq_all"' in lines
    assert '#SBATCH --output="./logs/%j.out"' in lines
    assert '#SBATCH --error="./logs/%j.err"' in lines
    assert "module load seqliner/dev" in lines
    assert "bamdir=/data/bams" in lines
    assert lines[-1] == (
        'srun -n 1 seqliner run rna_htseq_count_all -o "${outdir}" '
        '-r rna_mm10,pairedEnd,rna_directional "${bamdir}" "${samps}"'
    )
    # mail type is always set, the recipient only when configured
    assert "#SBATCH --mail-type=ALL,TIME_LIMIT_80,TIME_LIMIT_90" in lines
    assert not any("--mail-user" in line for line in lines)


def test_render_quotes_paths_and_adds_mail():
    job = SlurmJob(mail_user="someone@example.org", run_options="rna_hg38,pairedEnd")
    script = render_batch_script(job, "/data/my bams", "s.txt", "out")
    assert "bamdir='/data/my bams'" in script
    assert "#SBATCH --mail-user=someone@example.org" in script
    assert "-r rna_hg38,pairedEnd" in script


def test_job_from_config():
    job = job_from_config({"slurm": {"mem": "32G", "modules": ["htseq"]}})
    assert job.mem == "32G"
    assert job.modules == ["htseq"]
    assert job.partition == "prod"

    with pytest.raises(ValueError, match="memory"):
        job_from_config({"slurm": {"memory": "32G"}})


def test_write_batch_script_creates_log_dir(tmp_path):
    job = SlurmJob(log_dir=str(tmp_path / "logs"))
    path = write_batch_script(job, "bams", "samples", "out", tmp_path / "jobs" / "htseq.sbatch")
    assert path.read_text().startswith("#!/bin/bash\n")
    assert (tmp_path / "logs").is_dir()


def test_submit_dry_run_does_not_call_sbatch(tmp_path, monkeypatch):
    def boom(*args, **kwargs):
        raise AssertionError("sbatch should not run")

    monkeypatch.setattr(seqliner.subprocess, "run", boom)
    assert submit(tmp_path / "job.sbatch", dry_run=True) == 0


def test_submit_returns_exit_code_unchanged(tmp_path, monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, 3, stdout="", stderr="queue closed")

    monkeypatch.setattr(seqliner.subprocess, "run", fake_run)
    assert submit(tmp_path / "job.sbatch") == 3
    assert calls == [["sbatch", str(tmp_path / "job.sbatch")]]
