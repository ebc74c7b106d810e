"""Oracle price types, Pyth, Switchboard and Scope loaders, selection and validation checks."""