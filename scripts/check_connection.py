import os
import sys

# Add the project root to the path
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from regsim.data_loader import load_config_from_sheet, load_section_catalog_from_sheet

# Exact name of the spreadsheet in Drive
SPREADSHEET_NAME = os.environ.get('REGSIM_SPREADSHEET', "REGISTRATION_SIMULATION")
CREDENTIALS_FILE = "credentials.json"

def check_google_sheets():
    print("1. Connecting to Google Sheets...")

    if not os.environ.get('GCP_CREDENTIALS_JSON') and not os.path.exists(CREDENTIALS_FILE):
        print(f"ERROR: '{CREDENTIALS_FILE}' not found and GCP_CREDENTIALS_JSON is not set.")
        return

    try:
        config = load_config_from_sheet(SPREADSHEET_NAME, CREDENTIALS_FILE)
        print("\n✅ Configuration loaded:")
        print(f"   Students: {config.get('n_total_students')} (type: {type(config.get('n_total_students'))})")
        print(f"   Class years: {config.get('class_year_distribution')}")

        sections = load_section_catalog_from_sheet(SPREADSHEET_NAME, CREDENTIALS_FILE)
        print("\n✅ Section catalog loaded:")
        print(f"   Sections found: {len(sections)}")
        if sections:
            print(f"   First section: {sections[0].section_id} ({sections[0].component}, cap {sections[0].enrollment_cap})")

    except Exception as e:
        print(f"\n❌ AN ERROR OCCURRED: {e}")

if __name__ == "__main__":
    check_google_sheets()
