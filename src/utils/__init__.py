"""
Utils package.

Parsing Structure:
- Uploaded files are parsed into `models.transaction.TransactionRecord` objects.
- Field-level checks live in `value_validators` and raise `FieldValidationError`
  with the message that is reported back for the record.
- A batch is only ever stored whole: any error discards every parsed record.
"""
