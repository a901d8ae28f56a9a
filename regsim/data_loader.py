import copy
import csv
import json
import os
from typing import Any, Dict, List, Optional, Tuple
import gspread
from google.oauth2.service_account import Credentials
from .model import (
    Section, Slot, Student, Enrollment, MasterCourse, COMPONENTS, INDEPENDENT_STUDY, NOT_APPLICABLE
)
from .inventory import building_name
from .errors import DataIntegrityError

SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
    'https://www.googleapis.com/auth/drive'
]

DEFAULT_CONFIG: Dict[str, Any] = {
    'n_total_students': 1850,
    'n_thesis_seniors': 250,
    'class_year_distribution': {'FirstYear': 0.28, 'Sophomore': 0.26, 'Junior': 0.25, 'Senior': 0.21},
    'athlete_distribution': {'FirstYear': 0.30, 'Sophomore': 0.28, 'Junior': 0.24, 'Senior': 0.20},
    'course_target': 4,
    'thesis_course_target': 3,
    'thesis_course_level': 457,
    'non_major_departments': ['FYS', 'INDS', 'EXDS'],
    'catalog_seed': 1235,
    'room_assignment_seed': 456,
    'roster_seed': 2025,
    'enrollment_seed': 2025,
    'section_catalog_file': 'data/section_catalog.csv',
    'master_catalog_file': '',
    'output_dir': 'output',
}

INT_KEYS = [
    'n_total_students', 'n_thesis_seniors', 'course_target', 'thesis_course_target', 'thesis_course_level',
    'catalog_seed', 'room_assignment_seed', 'roster_seed', 'enrollment_seed',
]
DISTRIBUTION_KEYS = ['class_year_distribution', 'athlete_distribution']
LIST_KEYS = ['non_major_departments']

# Cells that mean "no value" in catalog exports
EMPTY_VALUES = {'', 'NA', 'N/A', 'NONE', 'NULL'}

SCHEDULE_HEADERS = [
    'SectionID', 'Department', 'Component', 'EnrollmentCap', 'Days', 'StartTime', 'EndTime', 'RoomID', 'RoomType',
    'BuildingName'
]
ENROLLMENT_HEADERS = ['StudentID', 'SectionID']
STUDENT_HEADERS = ['StudentID', 'ClassYear', 'Major', 'Persona', 'Gender', 'IsAthlete', 'IsThesis']

# --- Configuration ---

def _to_float(value) -> float:
    # Spreadsheet exports may use a decimal comma (0,28 -> 0.28)
    return float(str(value).replace(',', '.'))

def coerce_config(raw_config: Dict[str, Any]) -> Dict[str, Any]:
    """Converts raw values (JSON, sheet cells, env strings) to the types the engines expect."""
    config = {}

    # 1. Integers
    for key in INT_KEYS:
        if key in raw_config:
            config[key] = int(_to_float(raw_config[key]))

    # 2. Distributions: dict or "FirstYear:0.28, Senior:0.21"
    for key in DISTRIBUTION_KEYS:
        if key in raw_config:
            val = raw_config[key]
            if isinstance(val, str):
                val = val.strip()
                if val.startswith('{'):
                    val = json.loads(val)
                else:
                    pairs = [p.split(':', 1) for p in val.split(';' if ';' in val else ',') if ':' in p]
                    val = {name.strip(): share for name, share in pairs}
            config[key] = {str(k): _to_float(v) for k, v in val.items()}

    # 3. Lists of strings: "FYS, INDS" -> ["FYS", "INDS"]
    for key in LIST_KEYS:
        if key in raw_config:
            val = raw_config[key]
            if isinstance(val, str):
                config[key] = [x.strip() for x in val.split(',') if x.strip()]
            else:
                config[key] = [str(x) for x in val]

    # Anything else is copied as is
    for k, v in raw_config.items():
        if k not in config:
            config[k] = v

    return config

def _env_overrides() -> Dict[str, Any]:
    overrides = {}
    for key in DEFAULT_CONFIG:
        env_value = os.environ.get(f"REGSIM_{key.upper()}")
        if env_value is not None:
            overrides[key] = env_value
    return overrides

def load_config(config_path: Optional[str] = None) -> dict:
    """
    Builds the run configuration.
    Defaults are overridden by the JSON file (if given and present) and then
    by REGSIM_<KEY> environment variables.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with open(config_path, 'r', encoding='utf-8') as f:
            config.update(coerce_config(json.load(f)))

    config.update(coerce_config(_env_overrides()))
    return config

def resolve_path(config: dict, key: str, base_path: str) -> str:
    path = config.get(key) or ''
    if path and not os.path.isabs(path):
        path = os.path.join(base_path, path)
    return path

# --- Catalog parsing ---

def _is_empty(value) -> bool:
    return value is None or str(value).strip().upper() in EMPTY_VALUES

def _normalise_component(value: str) -> str:
    # "IndependentStudy" and "Independent Study" both name the same component
    if value.replace(' ', '').lower() == INDEPENDENT_STUDY.replace(' ', '').lower():
        return INDEPENDENT_STUDY
    return value

def parse_section_records(records: List[Dict[str, Any]]) -> List[Section]:
    """
    Validates catalog rows and turns them into Sections.
    Every problem is collected; if any is found a DataIntegrityError is raised
    and no Section is returned.
    """
    problems = []
    sections = []
    section_numbers: Dict[str, int] = {}
    seen_ids = set()

    for row_num, r in enumerate(records, start=1):
        row_problems = []
        for key in ['CourseCode', 'Department', 'CourseLevel', 'Component']:
            if _is_empty(r.get(key)):
                row_problems.append(f"row {row_num}: missing {key}")
        if row_problems:
            problems.extend(row_problems)
            continue

        course_code = str(r['CourseCode']).strip()
        component = _normalise_component(str(r['Component']).strip())
        if component not in COMPONENTS:
            problems.append(f"row {row_num}: unknown component '{r['Component']}' for {course_code}")
            continue

        try:
            course_level = int(_to_float(r['CourseLevel']))
        except ValueError:
            problems.append(f"row {row_num}: CourseLevel '{r['CourseLevel']}' is not a number")
            continue

        raw_cap = r.get('EnrollmentCap')
        if component == INDEPENDENT_STUDY:
            # Independent Study is uncapped, whatever the row says
            enrollment_cap = None
        elif _is_empty(raw_cap):
            problems.append(f"row {row_num}: {course_code} ({component}) has no EnrollmentCap")
            continue
        else:
            try:
                enrollment_cap = int(_to_float(raw_cap))
            except ValueError:
                problems.append(f"row {row_num}: EnrollmentCap '{raw_cap}' is not a number")
                continue
            if enrollment_cap <= 0:
                problems.append(f"row {row_num}: {course_code} has non-positive EnrollmentCap {enrollment_cap}")
                continue

        if _is_empty(r.get('SectionID')):
            section_numbers[course_code] = section_numbers.get(course_code, 0) + 1
            section_id = f"{course_code}-{section_numbers[course_code]}"
        else:
            section_id = str(r['SectionID']).strip()

        if section_id in seen_ids:
            problems.append(f"row {row_num}: duplicate SectionID {section_id}")
            continue
        seen_ids.add(section_id)

        sections.append(Section(
            section_id=section_id,
            course_code=course_code,
            department=str(r['Department']).strip(),
            course_level=course_level,
            component=component,
            enrollment_cap=enrollment_cap
        ))

    if problems:
        raise DataIntegrityError(problems)
    return sections

def parse_master_records(records: List[Dict[str, Any]]) -> List[MasterCourse]:
    problems = []
    courses = []
    for row_num, r in enumerate(records, start=1):
        missing = [k for k in ['CourseCode', 'Department', 'CourseLevel'] if _is_empty(r.get(k))]
        if missing:
            problems.append(f"row {row_num}: missing {', '.join(missing)}")
            continue
        try:
            level = int(_to_float(r['CourseLevel']))
        except ValueError:
            problems.append(f"row {row_num}: CourseLevel '{r['CourseLevel']}' is not a number")
            continue
        courses.append(MasterCourse(
            course_code=str(r['CourseCode']).strip(),
            department=str(r['Department']).strip(),
            course_level=level,
            course_title=str(r.get('CourseTitle') or '')
        ))
    if problems:
        raise DataIntegrityError(problems)
    return courses

def _read_csv(path: str) -> List[Dict[str, str]]:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Catalog file not found: {path}")
    with open(path, 'r', newline='', encoding='utf-8') as f:
        return list(csv.DictReader(f))

def load_section_catalog(path: str) -> List[Section]:
    return parse_section_records(_read_csv(path))

def load_master_catalog(path: str) -> List[MasterCourse]:
    return parse_master_records(_read_csv(path))

# --- Artifacts ---

def schedule_rows(sections: List[Section]) -> List[Dict[str, Any]]:
    rows = []
    for s in sections:
        slot = s.slot
        rows.append({
            'SectionID': s.section_id,
            'Department': s.department,
            'Component': s.component,
            'EnrollmentCap': '' if s.enrollment_cap is None else s.enrollment_cap,
            'Days': slot.days if slot else NOT_APPLICABLE,
            'StartTime': slot.start_time if slot else NOT_APPLICABLE,
            'EndTime': slot.end_time if slot else NOT_APPLICABLE,
            'RoomID': slot.room_id if slot else NOT_APPLICABLE,
            'RoomType': slot.room_type if slot else NOT_APPLICABLE,
            'BuildingName': building_name(slot.building_code) if slot else NOT_APPLICABLE,
        })
    return rows

def enrollment_rows(enrollments: List[Enrollment]) -> List[Dict[str, Any]]:
    return [{'StudentID': e.student_id, 'SectionID': e.section_id} for e in enrollments]

def student_rows(students: List[Student]) -> List[Dict[str, Any]]:
    return [{
        'StudentID': s.student_id,
        'ClassYear': s.class_year,
        'Major': s.major,
        'Persona': s.persona,
        'Gender': s.gender,
        'IsAthlete': s.is_athlete,
        'IsThesis': s.is_thesis,
    } for s in students]

def write_csv(rows: List[Dict[str, Any]], headers: List[str], path: str):
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=headers)
        writer.writeheader()
        writer.writerows(rows)

def read_artifacts(output_dir: str) -> Tuple[List[Section], List[Enrollment]]:
    """
    Reads schedule.csv and enrollment.csv back into Sections and Enrollments.
    The schedule artifact does not carry course levels, so those come back as 0.
    """
    sections = []
    for r in _read_csv(os.path.join(output_dir, 'schedule.csv')):
        slot = None
        if r['Days'] != NOT_APPLICABLE:
            # Room ids are "<building>-<room type>-<n>"
            slot = Slot(r['RoomID'], r['RoomType'], r['RoomID'].split('-')[0], r['Days'], r['StartTime'], r['EndTime'])
        sections.append(Section(
            section_id=r['SectionID'],
            course_code=r['SectionID'].rsplit('-', 1)[0],
            department=r['Department'],
            course_level=0,
            component=r['Component'],
            enrollment_cap=None if _is_empty(r['EnrollmentCap']) else int(r['EnrollmentCap']),
            slot=slot
        ))

    enrollments = [
        Enrollment(int(r['StudentID']), r['SectionID'])
        for r in _read_csv(os.path.join(output_dir, 'enrollment.csv'))
    ]
    return sections, enrollments

# --- Google Sheets ---

def _get_gspread_client(credentials_path: str = 'credentials.json') -> gspread.Client:
    """
    Returns a gspread client using hybrid authentication:
    1. The GCP_CREDENTIALS_JSON environment variable (Cloud Run).
    2. Otherwise the service-account file at credentials_path (local).
    """
    creds_json_str = os.environ.get('GCP_CREDENTIALS_JSON')

    if creds_json_str:
        try:
            creds_dict = json.loads(creds_json_str)
            creds = Credentials.from_service_account_info(creds_dict, scopes=SCOPES)
        except json.JSONDecodeError as e:
            raise ValueError("Could not decode GCP_CREDENTIALS_JSON") from e
    else:
        if not os.path.exists(credentials_path):
            raise FileNotFoundError(f"Credentials file not found: {credentials_path} and GCP_CREDENTIALS_JSON is not set.")
        creds = Credentials.from_service_account_file(credentials_path, scopes=SCOPES)

    return gspread.authorize(creds)

def _open_spreadsheet(spreadsheet_name: str, credentials_path: str) -> gspread.Spreadsheet:
    client = _get_gspread_client(credentials_path)
    try:
        return client.open(spreadsheet_name)
    except gspread.SpreadsheetNotFound:
        raise ValueError(f"Spreadsheet not found: {spreadsheet_name}")

def load_section_catalog_from_sheet(spreadsheet_name: str, credentials_path: str = 'credentials.json') -> List[Section]:
    sh = _open_spreadsheet(spreadsheet_name, credentials_path)
    try:
        ws = sh.worksheet("Sections")
    except gspread.WorksheetNotFound:
        raise ValueError(f"Spreadsheet '{spreadsheet_name}' has no 'Sections' worksheet")
    return parse_section_records(ws.get_all_records())

def load_config_from_sheet(spreadsheet_name: str, credentials_path: str = 'credentials.json',
                           config_path: Optional[str] = None) -> dict:
    """
    Reads parameter/value rows from the 'Config' worksheet on top of the
    defaults and the JSON file. Environment variables still win.
    A missing worksheet leaves the file configuration untouched.
    """
    sh = _open_spreadsheet(spreadsheet_name, credentials_path)
    config = load_config(config_path)
    try:
        ws = sh.worksheet("Config")
    except gspread.WorksheetNotFound:
        return config

    raw_config = {r['parameter']: r['value'] for r in ws.get_all_records() if str(r.get('parameter', '')).strip()}
    config.update(coerce_config(raw_config))
    config.update(coerce_config(_env_overrides()))
    return config

def _write_worksheet(sh: gspread.Spreadsheet, title: str, headers: List[str], rows: List[Dict[str, Any]]):
    try:
        ws = sh.worksheet(title)
        ws.clear()
    except gspread.WorksheetNotFound:
        ws = sh.add_worksheet(title=title, rows=max(len(rows) + 1, 100), cols=len(headers))

    values = [headers] + [[row.get(h, '') for h in headers] for row in rows]
    # Single batch update
    ws.update(values)
    ws.freeze(rows=1)

def save_artifacts_to_sheet(schedule: List[Dict[str, Any]], enrollment: List[Dict[str, Any]],
                            spreadsheet_name: str, credentials_path: str = 'credentials.json'):
    """Writes both artifacts to the 'Schedule' and 'Enrollment' worksheets, replacing previous content."""
    sh = _open_spreadsheet(spreadsheet_name, credentials_path)
    _write_worksheet(sh, "Schedule", SCHEDULE_HEADERS, schedule)
    _write_worksheet(sh, "Enrollment", ENROLLMENT_HEADERS, enrollment)
