# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import sys
from pathlib import Path

# Add src to PYTHONPATH for local runs
sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from forcemap import ForceClient, ForceError, SObject, StaticTokenCredential


class Contact(SObject):
    pass


entered = input("Enter instance URL (e.g. https://na1.salesforce.com): ").strip()
if not entered:
    print("No URL entered; exiting.")
    sys.exit(1)

token = input("Enter session token: ").strip()
if not token:
    print("No token entered; exiting.")
    sys.exit(1)


def log_call(call: str) -> None:
    print({"call": call})


with ForceClient(entered, StaticTokenCredential(token)) as client:
    log_call("Contact.materialize('Contact', client)")
    Contact.materialize("Contact", client)
    print(f"Contact has {len(Contact.attribute_names())} attributes")
    print(f"Label of LastName: {Contact.label_for('LastName')}")

    log_call("Contact.count()")
    print(f"Contacts: {Contact.count()}")

    log_call("Contact.find_or_create_by_LastName_and_FirstName('Quickstart', 'Sample')")
    contact = Contact.find_or_create_by_LastName_and_FirstName("Quickstart", "Sample")
    print({"Id": contact.Id, "persisted": contact.is_persisted()})

    log_call("contact.update_attributes({'Title': 'Tester'})")
    contact.update_attributes({"Title": "Tester"})
    print({"Title": contact.reload().Title})

    log_call("Contact.find_all_by_LastName('Quickstart')")
    page = Contact.find_all_by_LastName("Quickstart")
    print(page.to_dataframe()[["Id", "FirstName", "LastName"]])

    log_call("contact.delete()")
    try:
        contact.delete()
    except ForceError as ex:
        print({"delete_failed": ex.to_dict()})
