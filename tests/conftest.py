"""Root conftest for all tests.

Shared plan, history and device-file documents used across test modules.
"""

import pytest

from pwf.schema.history import History
from pwf.schema.parsing import parse_history

MINIMAL_PLAN = """\
plan_version: 1
cycle:
  days:
    - exercises:
        - name: Push-ups
          modality: strength
"""

STRENGTH_HISTORY = """\
history_version: 1
exported_at: "2025-01-15T10:30:00Z"
export_source:
  app_name: Test App
workouts:
  - id: push-1
    date: "2025-01-15"
    title: Push Day
    started_at: "2025-01-15T09:00:00Z"
    sport: strength-training
    exercises:
      - name: Bench Press
        modality: strength
        sets:
          - set_number: 1
            reps: 5
            weight_kg: 100
          - set_number: 2
            reps: 5
            weight_kg: 100
            rpe: 8
  - id: push-2
    date: "2025-01-18"
    title: Push Day
    exercises:
      - name: Overhead Press
        modality: strength
        sets:
          - set_number: 1
            reps: 8
            weight_kg: 50
"""

MULTISPORT_HISTORY = """\
history_version: 2
exported_at: "2025-06-01T12:00:00Z"
workouts:
  - id: tri-1
    date: "2025-06-01"
    started_at: "2025-06-01T07:00:00Z"
    title: Sprint Triathlon
    exercises:
      - id: swim-1
        name: Swim
        modality: stopwatch
        sport: swimming
        sets:
          - set_number: 1
            duration_sec: 900
            distance_meters: 750
      - id: bike-1
        name: Bike
        modality: stopwatch
        sport: cycling
        sets:
          - set_number: 1
            duration_sec: 2400
            distance_meters: 20000
      - id: run-1
        name: Run
        modality: stopwatch
        sport: running
        sets:
          - set_number: 1
            duration_sec: 1500
            distance_meters: 5000
    sport_segments:
      - segment_id: seg-0
        sport: swimming
        segment_index: 0
        exercise_ids: [swim-1]
        transition:
          transition_id: t1
          from_sport: swimming
          to_sport: cycling
          duration_sec: 120
      - segment_id: seg-1
        sport: cycling
        segment_index: 1
        exercise_ids: [bike-1]
        transition:
          transition_id: t2
          from_sport: cycling
          to_sport: running
          duration_sec: 60
      - segment_id: seg-2
        sport: running
        segment_index: 2
        exercise_ids: [run-1]
"""

GPS_HISTORY = """\
history_version: 2
exported_at: "2025-05-10T07:00:00Z"
workouts:
  - id: w1
    date: "2025-05-10"
    started_at: "2025-05-10T07:00:00Z"
    title: Tempo Run
    sport: running
    notes: "Felt good & strong"
    exercises:
      - name: Tempo
        modality: stopwatch
        sets:
          - set_number: 1
            duration_sec: 600
            distance_meters: 2000
            telemetry:
              heart_rate_avg: 150
              heart_rate_max: 165
              calories: 120
              time_series:
                timestamps:
                  - "2025-05-10T07:00:00Z"
                  - "2025-05-10T07:00:01Z"
                  - "2025-05-10T07:00:02Z"
                elapsed_sec: [0, 1, 2]
                heart_rate: [140, 142, 145]
                speed_mps: [3.2, 3.3, 3.4]
    telemetry:
      heart_rate_avg: 150
      total_calories: 120
      gps_route:
        route_id: route-1
        name: River Loop
        positions:
          - latitude_deg: 40.0
            longitude_deg: -105.0
            timestamp: "2025-05-10T07:00:00Z"
            elevation_m: 1600.0
            heart_rate_bpm: 140
          - latitude_deg: 40.001
            longitude_deg: -105.0
            timestamp: "2025-05-10T07:00:30Z"
            elevation_m: 1604.0
            heart_rate_bpm: 146
            speed_mps: 3.7
"""

TCX_ACTIVITY = b"""\
<?xml version="1.0" encoding="UTF-8"?>
<TrainingCenterDatabase xmlns="http://www.garmin.com/xmlschemas/TrainingCenterDatabase/v2"
    xmlns:ns3="http://www.garmin.com/xmlschemas/ActivityExtension/v2">
  <Activities>
    <Activity Sport="Running">
      <Id>2025-03-01T08:00:00Z</Id>
      <Lap StartTime="2025-03-01T08:00:00Z">
        <TotalTimeSeconds>120</TotalTimeSeconds>
        <DistanceMeters>400</DistanceMeters>
        <MaximumSpeed>3.8</MaximumSpeed>
        <Calories>30</Calories>
        <AverageHeartRateBpm><Value>140</Value></AverageHeartRateBpm>
        <MaximumHeartRateBpm><Value>155</Value></MaximumHeartRateBpm>
        <Intensity>Active</Intensity>
        <TriggerMethod>Manual</TriggerMethod>
        <Track>
          <Trackpoint>
            <Time>2025-03-01T08:00:00Z</Time>
            <Position><LatitudeDegrees>52.52</LatitudeDegrees><LongitudeDegrees>13.405</LongitudeDegrees></Position>
            <AltitudeMeters>34.0</AltitudeMeters>
            <DistanceMeters>0</DistanceMeters>
            <HeartRateBpm><Value>130</Value></HeartRateBpm>
            <Extensions><ns3:TPX><ns3:Speed>3.2</ns3:Speed><ns3:RunCadence>84</ns3:RunCadence></ns3:TPX></Extensions>
          </Trackpoint>
          <Trackpoint>
            <Time>2025-03-01T08:01:00Z</Time>
            <Position><LatitudeDegrees>52.521</LatitudeDegrees><LongitudeDegrees>13.405</LongitudeDegrees></Position>
            <AltitudeMeters>36.0</AltitudeMeters>
            <DistanceMeters>200</DistanceMeters>
            <HeartRateBpm><Value>150</Value></HeartRateBpm>
            <Extensions><ns3:TPX><ns3:Speed>3.4</ns3:Speed><ns3:RunCadence>86</ns3:RunCadence></ns3:TPX></Extensions>
          </Trackpoint>
          <Trackpoint>
            <Time>2025-03-01T08:02:00Z</Time>
            <Position><LatitudeDegrees>52.522</LatitudeDegrees><LongitudeDegrees>13.405</LongitudeDegrees></Position>
            <AltitudeMeters>35.0</AltitudeMeters>
            <DistanceMeters>400</DistanceMeters>
            <HeartRateBpm><Value>158</Value></HeartRateBpm>
            <Extensions><ns3:TPX><ns3:Speed>3.6</ns3:Speed><ns3:RunCadence>88</ns3:RunCadence></ns3:TPX></Extensions>
          </Trackpoint>
        </Track>
      </Lap>
      <Lap StartTime="2025-03-01T08:02:00Z">
        <TotalTimeSeconds>120</TotalTimeSeconds>
        <DistanceMeters>420</DistanceMeters>
        <Calories>32</Calories>
        <AverageHeartRateBpm><Value>150</Value></AverageHeartRateBpm>
        <MaximumHeartRateBpm><Value>160</Value></MaximumHeartRateBpm>
        <Intensity>Active</Intensity>
        <TriggerMethod>Manual</TriggerMethod>
      </Lap>
      <Notes>Easy shakeout</Notes>
      <Creator><Name>Forerunner 265</Name></Creator>
    </Activity>
  </Activities>
</TrainingCenterDatabase>
"""

GPX_TRACK = b"""\
<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="Test Watch"
    xmlns="http://www.topografix.com/GPX/1/1"
    xmlns:gpxtpx="http://www.garmin.com/xmlschemas/TrackPointExtension/v1">
  <trk>
    <name>Morning Ride</name>
    <type>cycling</type>
    <trkseg>
      <trkpt lat="47.3769" lon="8.5417">
        <ele>408.0</ele>
        <time>2025-04-02T06:30:00Z</time>
        <extensions><gpxtpx:TrackPointExtension><gpxtpx:hr>120</gpxtpx:hr><gpxtpx:cad>80</gpxtpx:cad></gpxtpx:TrackPointExtension></extensions>
      </trkpt>
      <trkpt lat="47.3779" lon="8.5417">
        <ele>412.0</ele>
        <time>2025-04-02T06:30:10Z</time>
        <extensions><gpxtpx:TrackPointExtension><gpxtpx:hr>130</gpxtpx:hr><gpxtpx:cad>82</gpxtpx:cad></gpxtpx:TrackPointExtension></extensions>
      </trkpt>
      <trkpt lat="47.3789" lon="8.5417">
        <ele>410.0</ele>
        <time>2025-04-02T06:30:20Z</time>
        <extensions><gpxtpx:TrackPointExtension><gpxtpx:hr>140</gpxtpx:hr><gpxtpx:cad>84</gpxtpx:cad></gpxtpx:TrackPointExtension></extensions>
      </trkpt>
    </trkseg>
  </trk>
</gpx>
"""


@pytest.fixture
def minimal_plan_yaml() -> str:
    """Smallest plan that validates: one day, one strength exercise, no meta."""
    return MINIMAL_PLAN


@pytest.fixture
def strength_history_yaml() -> str:
    """Two strength workouts recorded in kilograms."""
    return STRENGTH_HISTORY


@pytest.fixture
def multisport_history_yaml() -> str:
    """Swim, bike and run segments with matching transitions."""
    return MULTISPORT_HISTORY


@pytest.fixture
def gps_history_yaml() -> str:
    """One run with a GPS route and a per-second time series."""
    return GPS_HISTORY


@pytest.fixture
def gps_history() -> History:
    """Parsed form of ``gps_history_yaml``."""
    return parse_history(GPS_HISTORY)


@pytest.fixture
def tcx_bytes() -> bytes:
    """Two-lap running activity; only the first lap has trackpoints."""
    return TCX_ACTIVITY


@pytest.fixture
def gpx_bytes() -> bytes:
    """One cycling track of three points with heart rate and cadence extensions."""
    return GPX_TRACK
