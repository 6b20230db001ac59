from classes.countdown import CountdownTimer, format_time


def test_expires_once_after_seeded_seconds():
    fired = []
    timer = CountdownTimer(3, lambda: fired.append(True))

    timer.tick()
    timer.tick()
    assert fired == []
    assert timer.remaining == 1

    timer.tick()
    assert fired == [True]
    assert not timer.running

    timer.tick()
    timer.tick()
    assert fired == [True]


def test_zero_length_timer_fires_on_first_tick():
    fired = []
    timer = CountdownTimer(0, lambda: fired.append(True))
    timer.tick()
    timer.tick()
    assert fired == [True]
    assert timer.remaining == 0


def test_cancelled_timer_ignores_ticks():
    fired = []
    timer = CountdownTimer(1, lambda: fired.append(True))
    timer.cancel()
    assert timer.tick() is False
    assert fired == []
    assert timer.remaining == 1


def test_format_time():
    assert format_time(0) == "0:00"
    assert format_time(65) == "1:05"
    assert format_time(600) == "10:00"
    assert format_time(-3) == "0:00"
