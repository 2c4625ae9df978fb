from schedsim.models import Job, Machine, ScheduleStep


def test_machine_free_busy_transitions():
    machine = Machine(id=1)
    assert machine.is_free()
    machine.execute(Job(id=7, arrival_time=0, processing_time=[9, 4]))
    assert not machine.is_free()
    assert (machine.current_job_id, machine.remaining_time) == (7, 4)
    assert "job=7" in str(machine)
    machine.set_free()
    machine.set_free()
    assert machine.is_free()
    assert machine.current_job_id is None


def test_job_is_immutable():
    job = Job(id=0, arrival_time=0, processing_time=[1, 2])
    assert job.processing_time == (1, 2)
    try:
        job.arrival_time = 3  # type: ignore[misc]
    except AttributeError:
        pass
    else:  # pragma: no cover
        raise AssertionError("Job should be frozen")


def test_schedule_step_tuple():
    assert ScheduleStep(3, 1, 2).as_tuple() == (3, 1, 2)
