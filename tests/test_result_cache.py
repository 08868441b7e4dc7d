from mock_interview.orchestrator.result_cache import ResultCache
from mock_interview.orchestrator.schema import CandidateInfo


def test_put_then_get(cache):
    cache.put("interviewResults", {"totalQuestions": 3})

    assert cache.get("interviewResults") == {"totalQuestions": 3}


def test_put_overwrites_single_slot(cache):
    cache.put("interviewAnalysis", {"overallScore": 40})
    cache.put("interviewAnalysis", {"overallScore": 90})

    assert cache.get("interviewAnalysis") == {"overallScore": 90}
    assert cache.keys() == ["interviewAnalysis"]


def test_pop_is_a_one_time_view(cache):
    cache.put("interviewAnalysis", {"overallScore": 90})

    assert cache.pop("interviewAnalysis") == {"overallScore": 90}
    assert cache.pop("interviewAnalysis") is None


def test_missing_key_reads_as_none(cache):
    assert cache.get("nothing") is None
    assert not cache.delete("nothing")


def test_expired_entry_reads_as_absent_and_is_removed(cache):
    cache.put("interviewAnalysis", {"overallScore": 90}, ttl=-1)

    assert cache.get("interviewAnalysis") is None
    assert not (cache.cache_dir / "interviewAnalysis.json").exists()


def test_unexpired_entry_is_returned(cache):
    cache.put("interviewAnalysis", {"overallScore": 90}, ttl=3600)

    assert cache.get("interviewAnalysis") == {"overallScore": 90}


def test_models_are_stored_with_wire_names(cache):
    cache.put("candidate", CandidateInfo(name="Sam", experience_level="senior"))

    assert cache.get("candidate")["experienceLevel"] == "senior"


def test_unreadable_entry_reads_as_none(cache):
    (cache.cache_dir / "broken.json").write_text("{not json", encoding="utf-8")

    assert cache.get("broken") is None
    assert cache.keys() == []


def test_values_survive_a_new_cache_instance(cache):
    cache.put("interviewResults", {"totalResponses": 2})

    reopened = ResultCache(cache.cache_dir)

    assert reopened.get("interviewResults") == {"totalResponses": 2}
    assert not list(cache.cache_dir.glob("*.tmp"))
